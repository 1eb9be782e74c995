from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class CommissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: int
    booking_id: str
    booking_number: str
    job_id: Optional[str] = None
    reseller_id: str
    reseller_name: str
    client_id: str
    client_name: str
    commission_percent: float
    job_value: float
    commission_amount: int
    status: str
    period: str
    paid_at: Optional[datetime] = None
    created_at: datetime


class CommissionSummary(BaseModel):
    total_pending: int
    total_approved: int
    total_paid: int
    total_amount: int
    by_period: Dict[str, int]


class InvoiceItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category_id: str
    description: str
    quantity: int
    unit_price: int
    total: int


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: int
    invoice_number: str
    booking_id: str
    job_id: Optional[str] = None
    client_id: str
    client_name: str
    issue_date: date
    due_date: date
    subtotal: int
    tax: int
    total: int
    status: str
    sent_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    items: List[InvoiceItemResponse]


class MarkOverdueRequest(BaseModel):
    today: Optional[date] = None
