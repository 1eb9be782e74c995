from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fastapi import Depends, HTTPException, Request

from itad.deps.auth import require_auth


class Role(Enum):
    ADMIN = "admin"
    RESELLER = "reseller"
    CLIENT = "client"
    DRIVER = "driver"


@dataclass(frozen=True)
class Principal:
    user_id: str
    company_id: int
    role: Role
    # client id, reseller id or driver id, depending on role
    org_id: Optional[str] = None


def require_role(*roles: Role):
    """Dependency factory: authenticate, then admit only the listed roles (any role when none given)."""

    def dependency(request: Request, claims: dict = Depends(require_auth)) -> Principal:
        try:
            user_role = Role(str(claims.get("role", "")).lower())
        except ValueError as exc:
            raise HTTPException(status_code=403, detail="Invalid role claim") from exc

        if roles and user_role not in roles:
            raise HTTPException(status_code=403, detail="Insufficient role")

        org_id = claims.get("org_id")
        if user_role is not Role.ADMIN and not org_id:
            raise HTTPException(status_code=403, detail="Missing org_id claim")

        request.state.role = user_role.value
        return Principal(
            user_id=str(claims["sub"]),
            company_id=int(claims["company_id"]),
            role=user_role,
            org_id=str(org_id) if org_id else None,
        )

    return dependency
