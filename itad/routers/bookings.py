from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from itad.core.authorization import Principal, Role, require_role
from itad.core.errors import NotFoundError, ValidationError
from itad.models.booking import Booking
from itad.schemas.booking import AssignDriverRequest, BookingCreate, BookingResponse, StatusUpdate
from itad.services import booking_lifecycle

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _check_company(x_company_id: int, principal: Principal) -> None:
    if int(x_company_id) != principal.company_id:
        raise HTTPException(status_code=403, detail="Company mismatch")


def _visible(booking: Booking, principal: Principal) -> bool:
    if principal.role is Role.CLIENT:
        return booking.client_id == principal.org_id
    if principal.role is Role.RESELLER:
        return booking.reseller_id == principal.org_id
    if principal.role is Role.DRIVER:
        return booking.driver_id == principal.org_id
    return True


@router.post("", response_model=BookingResponse)
def create_booking(
    payload: BookingCreate,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN, Role.CLIENT, Role.RESELLER)),
):
    _check_company(x_company_id, principal)

    client_id = payload.client_id
    reseller_id = payload.reseller_id
    if principal.role is Role.CLIENT:
        client_id = principal.org_id
    elif principal.role is Role.RESELLER:
        reseller_id = principal.org_id

    if not client_id or not payload.client_name:
        raise ValidationError("Client ID and client name are required.")
    if reseller_id and not payload.reseller_name:
        raise ValidationError("Reseller name is required when a reseller is set.")

    return booking_lifecycle.create_booking(
        principal.company_id,
        client_id=client_id,
        client_name=payload.client_name,
        reseller_id=reseller_id,
        reseller_name=payload.reseller_name if reseller_id else None,
        site_id=payload.site_id,
        site_name=payload.site_name,
        site_address=payload.site_address,
        postcode=payload.postcode,
        contact_name=payload.contact_name,
        contact_phone=payload.contact_phone,
        scheduled_date=payload.scheduled_date,
        assets=[a.model_dump() for a in payload.assets],
        charity_percent=payload.charity_percent,
        created_by=principal.user_id,
    )


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    status: Optional[str] = None,
    client_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role()),
):
    _check_company(x_company_id, principal)

    filters = {"client_id": client_id}
    if principal.role is Role.CLIENT:
        filters["client_id"] = principal.org_id
    elif principal.role is Role.RESELLER:
        filters["reseller_id"] = principal.org_id
    elif principal.role is Role.DRIVER:
        filters["driver_id"] = principal.org_id

    return booking_lifecycle.list_bookings(
        principal.company_id,
        status=status,
        limit=limit,
        offset=offset,
        **filters,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: str,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role()),
):
    _check_company(x_company_id, principal)

    booking = booking_lifecycle.get_booking(principal.company_id, booking_id)
    if not _visible(booking, principal):
        raise NotFoundError("Booking", booking_id)
    return booking


@router.post("/{booking_id}/assign", response_model=BookingResponse)
def assign_driver(
    booking_id: str,
    payload: AssignDriverRequest,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    _check_company(x_company_id, principal)
    return booking_lifecycle.assign_driver(principal.company_id, booking_id, payload.driver_id, principal.user_id)


@router.post("/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(
    booking_id: str,
    payload: StatusUpdate,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    _check_company(x_company_id, principal)
    return booking_lifecycle.update_booking_status(
        principal.company_id, booking_id, payload.status, actor_id=principal.user_id
    )


@router.post("/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(
    booking_id: str,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    _check_company(x_company_id, principal)
    return booking_lifecycle.complete_booking(principal.company_id, booking_id, principal.user_id)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    _check_company(x_company_id, principal)
    return booking_lifecycle.cancel_booking(principal.company_id, booking_id, actor_id=principal.user_id)


@router.post("/{booking_id}/resync", response_model=BookingResponse)
def resync_booking(
    booking_id: str,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    _check_company(x_company_id, principal)
    return booking_lifecycle.resync_booking(principal.company_id, booking_id, actor_id=principal.user_id)
