from datetime import datetime, timedelta, timezone
import os
from typing import Optional

import jwt

JWT_ALGORITHM = "HS256"
JWT_EXP_HOURS = 8

ROLES = ("admin", "client", "reseller", "driver")


def _get_jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise ValueError("JWT_SECRET is required")
    if len(secret) < 32:
        raise ValueError("JWT_SECRET must be at least 32 characters")
    return secret


def create_access_token(
    user_id: str,
    company_id: int,
    role: str = "admin",
    org_id: Optional[str] = None,
) -> str:
    """
    ``org_id`` ties a non-admin caller to the rows it may see: the client id
    for clients, the reseller id for resellers, the driver id for drivers.
    """
    role = str(role).lower()
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")
    if role != "admin" and not org_id:
        raise ValueError(f"org_id is required for role {role}")

    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "company_id": int(company_id),
        "role": role,
        "exp": now + timedelta(hours=JWT_EXP_HOURS),
    }
    if org_id:
        payload["org_id"] = str(org_id)
    return jwt.encode(payload, _get_jwt_secret(), algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as exc:
        raise ValueError("Invalid or expired token") from exc

    if "sub" not in payload or "company_id" not in payload:
        raise ValueError("Invalid token claims")
    if payload.get("role") not in ROLES:
        raise ValueError("Invalid token claims")

    return payload
