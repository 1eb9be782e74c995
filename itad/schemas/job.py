from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class EvidenceCreate(BaseModel):
    photos: Optional[List[str]] = None
    signature: Optional[str] = None
    seal_numbers: Optional[List[str]] = None
    notes: Optional[str] = None


class JobAssetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category_id: str
    quantity: int
    sanitised: bool
    sanitisation_record_id: Optional[str] = None
    grade: Optional[str] = None
    resale_value: Optional[int] = None
    grading_record_id: Optional[str] = None


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: int
    erp_job_number: str
    booking_id: str
    status: str
    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    vehicle_reg: Optional[str] = None
    vehicle_type: Optional[str] = None
    driver_phone: Optional[str] = None
    client_name: str
    site_name: str
    site_address: str
    scheduled_date: datetime
    co2e_saved: float
    buyback_value: float
    charity_percent: int
    travel_emissions: float
    evidence: Dict[str, Any]
    completed_date: Optional[datetime] = None
    created_at: datetime
    assets: List[JobAssetResponse]
