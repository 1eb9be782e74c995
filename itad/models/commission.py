import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.schema import UniqueConstraint

from itad.database import Base


class Commission(Base):
    __tablename__ = "commissions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(Integer, nullable=False, index=True)

    booking_id = Column(String, ForeignKey("bookings.id"), nullable=False)
    booking_number = Column(String, nullable=False)
    job_id = Column(String, nullable=True)

    reseller_id = Column(String, nullable=False, index=True)
    reseller_name = Column(String, nullable=False)
    client_id = Column(String, nullable=False)
    client_name = Column(String, nullable=False)

    commission_percent = Column(Float, nullable=False)
    job_value = Column(Float, nullable=False)
    commission_amount = Column(Integer, nullable=False)

    status = Column(String, nullable=False, index=True, default="pending")
    period = Column(String, nullable=False, index=True)  # YYYY-MM

    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("booking_id", name="uq_commissions_booking"),
    )
