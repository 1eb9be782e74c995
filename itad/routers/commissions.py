from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from itad.core.authorization import Principal, Role, require_role
from itad.schemas.billing import CommissionResponse, CommissionSummary
from itad.schemas.booking import StatusUpdate
from itad.services import commission_service

router = APIRouter(prefix="/commissions", tags=["Commissions"])


def _reseller_scope(principal: Principal, reseller_id: Optional[str]) -> Optional[str]:
    if principal.role is Role.RESELLER:
        return principal.org_id
    return reseller_id


@router.get("", response_model=List[CommissionResponse])
def list_commissions(
    reseller_id: Optional[str] = None,
    status: Optional[str] = None,
    period: Optional[str] = None,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN, Role.RESELLER)),
):
    if int(x_company_id) != principal.company_id:
        raise HTTPException(status_code=403, detail="Company mismatch")

    return commission_service.list_commissions(
        principal.company_id,
        reseller_id=_reseller_scope(principal, reseller_id),
        status=status,
        period=period,
    )


@router.get("/summary", response_model=CommissionSummary)
def commission_summary(
    reseller_id: Optional[str] = None,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN, Role.RESELLER)),
):
    if int(x_company_id) != principal.company_id:
        raise HTTPException(status_code=403, detail="Company mismatch")

    return commission_service.commission_summary(
        principal.company_id,
        reseller_id=_reseller_scope(principal, reseller_id),
    )


@router.post("/{commission_id}/status", response_model=CommissionResponse)
def update_commission_status(
    commission_id: str,
    payload: StatusUpdate,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    if int(x_company_id) != principal.company_id:
        raise HTTPException(status_code=403, detail="Company mismatch")

    return commission_service.update_commission_status(
        principal.company_id, commission_id, payload.status, actor_id=principal.user_id
    )
