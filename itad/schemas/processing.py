from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SanitisationCreate(BaseModel):
    booking_id: str
    asset_id: str
    method: str
    method_details: Optional[str] = None
    notes: Optional[str] = None


class SanitisationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: int
    booking_id: str
    asset_id: str
    method: str
    method_details: Optional[str] = None
    performed_by: str
    certificate_id: str
    verified: bool
    notes: Optional[str] = None
    timestamp: datetime


class GradingCreate(BaseModel):
    booking_id: str
    asset_id: str
    asset_category: str
    grade: str
    condition: Optional[str] = None
    notes: Optional[str] = None


class GradingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: int
    booking_id: str
    asset_id: str
    asset_category: str
    grade: str
    resale_value: int
    condition: Optional[str] = None
    notes: Optional[str] = None
    graded_by: str
    graded_at: datetime


class ResaleValueResponse(BaseModel):
    category: str
    grade: str
    quantity: int
    resale_value: int
