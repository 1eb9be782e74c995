from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from itad.core.authorization import Principal, Role, require_role
from itad.core.errors import NotFoundError
from itad.schemas.billing import InvoiceResponse, MarkOverdueRequest
from itad.schemas.booking import StatusUpdate
from itad.services import booking_lifecycle, invoice_service

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def _check_company(x_company_id: int, principal: Principal) -> None:
    if int(x_company_id) != principal.company_id:
        raise HTTPException(status_code=403, detail="Company mismatch")


@router.get("", response_model=List[InvoiceResponse])
def list_invoices(
    status: Optional[str] = None,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN, Role.CLIENT, Role.RESELLER)),
):
    _check_company(x_company_id, principal)

    filters = {}
    if principal.role is Role.CLIENT:
        filters["client_id"] = principal.org_id
    elif principal.role is Role.RESELLER:
        filters["reseller_id"] = principal.org_id

    return invoice_service.list_invoices(principal.company_id, status=status, **filters)


@router.post("/mark-overdue", response_model=List[InvoiceResponse])
def mark_overdue(
    payload: Optional[MarkOverdueRequest] = None,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    _check_company(x_company_id, principal)
    today = payload.today if payload is not None else None
    return invoice_service.mark_overdue_invoices(principal.company_id, today=today)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: str,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN, Role.CLIENT, Role.RESELLER)),
):
    _check_company(x_company_id, principal)

    invoice = invoice_service.get_invoice(principal.company_id, invoice_id)
    if principal.role is Role.CLIENT and invoice.client_id != principal.org_id:
        raise NotFoundError("Invoice", invoice_id)
    if principal.role is Role.RESELLER:
        booking = booking_lifecycle.get_booking(principal.company_id, invoice.booking_id)
        if booking.reseller_id != principal.org_id:
            raise NotFoundError("Invoice", invoice_id)
    return invoice


@router.post("/{invoice_id}/status", response_model=InvoiceResponse)
def update_invoice_status(
    invoice_id: str,
    payload: StatusUpdate,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    _check_company(x_company_id, principal)
    return invoice_service.update_invoice_status(
        principal.company_id, invoice_id, payload.status, actor_id=principal.user_id
    )
