import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import relationship

from itad.database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(Integer, nullable=False, index=True)
    erp_job_number = Column(String, nullable=False, unique=True)
    booking_id = Column(String, ForeignKey("bookings.id"), nullable=False, unique=True)

    status = Column(String, nullable=False, index=True, default="booked")

    driver_id = Column(String, nullable=True, index=True)
    driver_name = Column(String, nullable=True)
    vehicle_reg = Column(String, nullable=True)
    vehicle_type = Column(String, nullable=True)
    driver_phone = Column(String, nullable=True)

    client_name = Column(String, nullable=False)
    site_name = Column(String, nullable=False)
    site_address = Column(String, nullable=False)
    scheduled_date = Column(DateTime(timezone=True), nullable=False)

    co2e_saved = Column(Float, nullable=False, default=0)
    buyback_value = Column(Float, nullable=False, default=0)
    charity_percent = Column(Integer, nullable=False, default=0)
    travel_emissions = Column(Float, nullable=False, default=0)

    # photos, signature, seal_numbers, notes; not interpreted here
    evidence = Column(MutableDict.as_mutable(JSON), nullable=False, default=dict)

    completed_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    assets = relationship(
        "JobAsset",
        back_populates="job",
        order_by="JobAsset.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class JobAsset(Base):
    __tablename__ = "job_assets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(String, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)

    sanitised = Column(Boolean, nullable=False, default=False)
    sanitisation_record_id = Column(String, nullable=True)

    grade = Column(String, nullable=True)
    resale_value = Column(Integer, nullable=True)  # per unit
    grading_record_id = Column(String, nullable=True)

    job = relationship("Job", back_populates="assets")
