from fastapi import HTTPException, Request

from itad.services.auth_service import verify_token


def _bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Missing Authorization header")

    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Invalid Authorization header")

    return token.strip()


def _header_company_id(request: Request) -> int:
    raw = request.headers.get("X-Company-Id")
    if raw is None:
        raise HTTPException(status_code=403, detail="Missing X-Company-Id header")
    try:
        return int(raw)
    except ValueError as exc:
        raise HTTPException(status_code=403, detail="Invalid X-Company-Id header") from exc


def require_auth(request: Request) -> dict:
    """
    Verify the bearer token and bind the caller to the tenant named in
    ``X-Company-Id``. Returns the token claims; identity is also left on
    ``request.state`` for handlers and logging.
    """
    try:
        claims = verify_token(_bearer_token(request))
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    company_id = int(claims["company_id"])
    if _header_company_id(request) != company_id:
        raise HTTPException(status_code=403, detail="Company mismatch")

    request.state.user_id = str(claims["sub"])
    request.state.company_id = company_id
    request.state.org_id = claims.get("org_id")

    return claims
