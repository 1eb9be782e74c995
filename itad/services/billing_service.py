import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from itad.models.booking import Booking
from itad.models.commission import Commission
from itad.models.invoice import Invoice, InvoiceItem
from itad.services import store, valuation
from itad.services.transitions import run_cascade

logger = logging.getLogger(__name__)


def create_commission_for_booking(db: Session, booking: Booking, now: datetime) -> Optional[Commission]:
    """
    One pending commission for a booking sold through a reseller.
    Returns None when the booking has no reseller or already has one.
    """
    if not booking.reseller_id or not booking.reseller_name:
        return None

    existing = db.query(Commission).filter(Commission.booking_id == booking.id).one_or_none()
    if existing is not None:
        return None

    percent = valuation.DEFAULT_COMMISSION_PERCENT
    commission = Commission(
        company_id=booking.company_id,
        booking_id=booking.id,
        booking_number=booking.booking_number,
        job_id=booking.job_id,
        reseller_id=booking.reseller_id,
        reseller_name=booking.reseller_name,
        client_id=booking.client_id,
        client_name=booking.client_name,
        commission_percent=percent,
        job_value=booking.estimated_buyback,
        commission_amount=valuation.calculate_commission_amount(booking.estimated_buyback, percent),
        status="pending",
        period=now.strftime("%Y-%m"),
        created_at=now,
    )
    db.add(commission)
    db.flush()

    logger.info(
        "Commission created",
        extra={"booking_id": booking.id, "commission_id": commission.id, "amount": commission.commission_amount},
    )
    return commission


def create_invoice_for_booking(db: Session, booking: Booking, now: datetime) -> Optional[Invoice]:
    existing = db.query(Invoice).filter(Invoice.booking_id == booking.id).one_or_none()
    if existing is not None:
        return None

    lines = valuation.build_invoice_lines(booking.assets, booking.estimated_buyback)
    totals = valuation.invoice_totals(lines)
    issue_date = now.date()

    invoice = Invoice(
        company_id=booking.company_id,
        invoice_number=store.next_sequence(db, f"INV-{now.year}"),
        booking_id=booking.id,
        job_id=booking.job_id,
        client_id=booking.client_id,
        client_name=booking.client_name,
        issue_date=issue_date,
        due_date=valuation.invoice_due_date(issue_date),
        subtotal=totals["subtotal"],
        tax=totals["tax"],
        total=totals["total"],
        status="draft",
        created_at=now,
        items=[
            InvoiceItem(
                category_id=line.category_id,
                description=line.description,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total=line.total,
            )
            for line in lines
        ],
    )
    db.add(invoice)
    db.flush()

    logger.info(
        "Invoice created",
        extra={"booking_id": booking.id, "invoice_id": invoice.id, "total": invoice.total},
    )
    return invoice


def on_booking_completed(db: Session, booking: Booking, now: datetime) -> None:
    """Reactive billing for a booking that just moved into ``completed``. Never raises."""
    run_cascade(
        db,
        "create_commission",
        lambda: create_commission_for_booking(db, booking, now),
        booking_id=booking.id,
    )
    run_cascade(
        db,
        "create_invoice",
        lambda: create_invoice_for_booking(db, booking, now),
        booking_id=booking.id,
    )
