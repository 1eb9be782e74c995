from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class DriverCreate(BaseModel):
    name: str
    vehicle_reg: str
    phone: Optional[str] = None
    user_id: Optional[str] = None
    vehicle_type: Literal["van", "truck", "car"] = "van"
    vehicle_fuel_type: Literal["petrol", "diesel", "electric"] = "diesel"


class DriverResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: int
    user_id: Optional[str] = None
    name: str
    phone: Optional[str] = None
    vehicle_reg: str
    vehicle_type: str
    vehicle_fuel_type: str
    is_active: bool
    created_at: datetime
