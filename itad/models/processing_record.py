import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.schema import Index, UniqueConstraint

from itad.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class SanitisationRecord(Base):
    __tablename__ = "sanitisation_records"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(Integer, nullable=False, index=True)
    booking_id = Column(String, ForeignKey("bookings.id"), nullable=False)
    asset_id = Column(String, nullable=False)  # asset category id

    method = Column(String, nullable=False)
    method_details = Column(String, nullable=True)
    performed_by = Column(String, nullable=False)
    certificate_id = Column(String, nullable=False)
    verified = Column(Boolean, nullable=False, default=False)
    notes = Column(String, nullable=True)

    timestamp = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_sanitisation_records_booking", "company_id", "booking_id"),
        UniqueConstraint("certificate_id", name="uq_sanitisation_records_certificate_id"),
    )


class GradingRecord(Base):
    __tablename__ = "grading_records"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(Integer, nullable=False, index=True)
    booking_id = Column(String, ForeignKey("bookings.id"), nullable=False)
    asset_id = Column(String, nullable=False)
    asset_category = Column(String, nullable=False)

    grade = Column(String, nullable=False)  # A|B|C|D|Recycled
    resale_value = Column(Integer, nullable=False, default=0)
    condition = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    graded_by = Column(String, nullable=False)
    graded_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_grading_records_booking", "company_id", "booking_id"),
    )
