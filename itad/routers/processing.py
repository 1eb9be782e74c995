from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from itad.core.authorization import Principal, Role, require_role
from itad.core.errors import ValidationError
from itad.schemas.processing import (
    GradingCreate,
    GradingResponse,
    ResaleValueResponse,
    SanitisationCreate,
    SanitisationResponse,
)
from itad.services import processing_service, valuation

sanitisation_router = APIRouter(prefix="/sanitisation", tags=["Sanitisation"])
grading_router = APIRouter(prefix="/grading", tags=["Grading"])


def _check_company(x_company_id: int, principal: Principal) -> None:
    if int(x_company_id) != principal.company_id:
        raise HTTPException(status_code=403, detail="Company mismatch")


@sanitisation_router.post("", response_model=SanitisationResponse)
def record_sanitisation(
    payload: SanitisationCreate,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    _check_company(x_company_id, principal)
    return processing_service.record_sanitisation(
        principal.company_id,
        payload.booking_id,
        payload.asset_id,
        payload.method,
        principal.user_id,
        method_details=payload.method_details,
        notes=payload.notes,
    )


@sanitisation_router.get("", response_model=List[SanitisationResponse])
def list_sanitisation_records(
    booking_id: Optional[str] = None,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    _check_company(x_company_id, principal)
    return processing_service.list_sanitisation_records(principal.company_id, booking_id=booking_id)


@sanitisation_router.post("/{record_id}/verify", response_model=SanitisationResponse)
def verify_sanitisation(
    record_id: str,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    _check_company(x_company_id, principal)
    return processing_service.verify_sanitisation(principal.company_id, record_id)


@grading_router.post("", response_model=GradingResponse)
def record_grading(
    payload: GradingCreate,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    _check_company(x_company_id, principal)
    return processing_service.record_grading(
        principal.company_id,
        payload.booking_id,
        payload.asset_id,
        payload.asset_category,
        payload.grade,
        principal.user_id,
        condition=payload.condition,
        notes=payload.notes,
    )


@grading_router.get("", response_model=List[GradingResponse])
def list_grading_records(
    booking_id: Optional[str] = None,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    _check_company(x_company_id, principal)
    return processing_service.list_grading_records(principal.company_id, booking_id=booking_id)


@grading_router.get("/resale-value", response_model=ResaleValueResponse)
def resale_value(
    category: str,
    grade: str,
    quantity: int = Query(1, ge=1),
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role()),
):
    _check_company(x_company_id, principal)

    if grade not in valuation.GRADE_MULTIPLIERS:
        raise ValidationError(
            f'Invalid grade "{grade}".',
            {"grade": grade, "allowed_grades": list(valuation.GRADE_MULTIPLIERS)},
        )

    return ResaleValueResponse(
        category=category,
        grade=grade,
        quantity=quantity,
        resale_value=valuation.calculate_resale_value(category, grade, quantity),
    )
