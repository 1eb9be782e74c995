from typing import List

from fastapi import APIRouter, Depends, Header, HTTPException

from itad.core.authorization import Principal, Role, require_role
from itad.database import SessionLocal
from itad.models.driver import Driver
from itad.schemas.driver import DriverCreate, DriverResponse
from itad.services import store

router = APIRouter(prefix="/drivers", tags=["Drivers"])


@router.post("", response_model=DriverResponse)
def create_driver(
    payload: DriverCreate,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    if int(x_company_id) != principal.company_id:
        raise HTTPException(status_code=403, detail="Company mismatch")

    db = SessionLocal()
    try:
        row = Driver(
            company_id=principal.company_id,
            user_id=payload.user_id,
            name=payload.name,
            phone=payload.phone,
            vehicle_reg=payload.vehicle_reg,
            vehicle_type=payload.vehicle_type,
            vehicle_fuel_type=payload.vehicle_fuel_type,
            is_active=True,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row
    finally:
        db.close()


@router.get("", response_model=List[DriverResponse])
def list_drivers(
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    if int(x_company_id) != principal.company_id:
        raise HTTPException(status_code=403, detail="Company mismatch")

    db = SessionLocal()
    try:
        rows = (
            db.query(Driver)
            .filter(Driver.company_id == principal.company_id)
            .order_by(Driver.name.asc(), Driver.id.asc())
            .all()
        )
        return rows
    finally:
        db.close()


@router.get("/{driver_id}", response_model=DriverResponse)
def get_driver(
    driver_id: str,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN)),
):
    if int(x_company_id) != principal.company_id:
        raise HTTPException(status_code=403, detail="Company mismatch")

    with store.unit_of_work() as db:
        return store.get_driver(db, principal.company_id, driver_id)
