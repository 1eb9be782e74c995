import os
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from itad.services.auth_service import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])

TOKEN_ENDPOINT_ENVS = frozenset({"dev", "local", "test"})


class TokenRequest(BaseModel):
    user_id: str
    company_id: int
    role: str = "admin"
    org_id: Optional[str] = None


@router.post("/token")
def issue_token(payload: TokenRequest):
    """Development-only token minting; production tokens come from the identity provider."""
    if os.getenv("ENV", "dev").lower() not in TOKEN_ENDPOINT_ENVS:
        raise HTTPException(status_code=404, detail="Not Found")

    try:
        token = create_access_token(
            user_id=payload.user_id,
            company_id=payload.company_id,
            role=payload.role,
            org_id=payload.org_id,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {"access_token": token, "token_type": "bearer", "role": payload.role.lower()}
