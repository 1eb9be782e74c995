from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class BookingAssetIn(BaseModel):
    category_id: str
    # validated by the service so the error names the category
    quantity: int


class BookingCreate(BaseModel):
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    reseller_id: Optional[str] = None
    reseller_name: Optional[str] = None
    site_id: Optional[str] = None
    site_name: str
    site_address: str
    postcode: str
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    scheduled_date: datetime
    assets: List[BookingAssetIn]
    charity_percent: Optional[int] = None


class AssignDriverRequest(BaseModel):
    driver_id: str


class StatusUpdate(BaseModel):
    status: str


class BookingAssetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category_id: str
    category_name: str
    quantity: int


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: int
    booking_number: str
    status: str
    client_id: str
    client_name: str
    reseller_id: Optional[str] = None
    reseller_name: Optional[str] = None
    site_id: Optional[str] = None
    site_name: str
    site_address: str
    postcode: str
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    scheduled_date: datetime
    estimated_co2e: float
    estimated_buyback: float
    charity_percent: int
    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    job_id: Optional[str] = None
    scheduled_by: Optional[str] = None
    completed_by: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    collected_at: Optional[datetime] = None
    sanitised_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime
    assets: List[BookingAssetResponse]
