import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from itad.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(Integer, nullable=False, index=True)
    booking_number = Column(String, nullable=False, unique=True)

    status = Column(String, nullable=False, index=True, default="created")

    client_id = Column(String, nullable=False, index=True)
    client_name = Column(String, nullable=False)
    reseller_id = Column(String, nullable=True, index=True)
    reseller_name = Column(String, nullable=True)

    site_id = Column(String, nullable=True)
    site_name = Column(String, nullable=False)
    site_address = Column(String, nullable=False)
    postcode = Column(String, nullable=False)
    contact_name = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)

    scheduled_date = Column(DateTime(timezone=True), nullable=False)

    estimated_co2e = Column(Float, nullable=False, default=0)
    estimated_buyback = Column(Float, nullable=False, default=0)
    charity_percent = Column(Integer, nullable=False, default=0)

    driver_id = Column(String, nullable=True, index=True)
    driver_name = Column(String, nullable=True)
    scheduled_by = Column(String, nullable=True)
    completed_by = Column(String, nullable=True)

    # milestone timestamps, set once
    scheduled_at = Column(DateTime(timezone=True), nullable=True)
    collected_at = Column(DateTime(timezone=True), nullable=True)
    sanitised_at = Column(DateTime(timezone=True), nullable=True)
    graded_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    job_id = Column(String, nullable=True)

    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    assets = relationship(
        "BookingAsset",
        back_populates="booking",
        order_by="BookingAsset.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("charity_percent BETWEEN 0 AND 100", name="ck_bookings_charity_percent_range"),
    )

    def category_ids(self) -> set:
        return {a.category_id for a in self.assets}

    def total_quantity(self) -> int:
        return sum(int(a.quantity) for a in self.assets)


class BookingAsset(Base):
    __tablename__ = "booking_assets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        String,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category_id = Column(String, nullable=False)
    category_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)

    booking = relationship("Booking", back_populates="assets")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_booking_assets_quantity_positive"),
    )
