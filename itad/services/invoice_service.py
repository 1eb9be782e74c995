import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from itad.core.errors import InvalidTransitionError
from itad.models.booking import Booking
from itad.models.invoice import Invoice
from itad.services import store
from itad.services.transitions import check_transition, table

logger = logging.getLogger(__name__)

INVOICE_STATUSES = ("draft", "sent", "paid", "overdue", "cancelled")

INVOICE_TRANSITIONS = table(
    {
        "draft": ("sent", "cancelled"),
        "sent": ("paid", "overdue", "cancelled"),
        "paid": ("cancelled",),
        "overdue": ("paid", "cancelled"),
        "cancelled": (),
    }
)

_STATUS_TIMESTAMPS = {
    "sent": "sent_at",
    "paid": "paid_at",
    "cancelled": "cancelled_at",
}


def _apply(invoice: Invoice, status: str, now: datetime, actor_id: Optional[str]) -> None:
    previous = invoice.status
    invoice.status = status

    column = _STATUS_TIMESTAMPS.get(status)
    if column is not None and getattr(invoice, column) is None:
        setattr(invoice, column, now)

    logger.info(
        "Invoice status updated",
        extra={"invoice_id": invoice.id, "from_status": previous, "to_status": status, "actor_id": actor_id},
    )


def update_invoice_status(
    company_id: int,
    invoice_id: str,
    status: str,
    *,
    actor_id: Optional[str] = None,
    db: Optional[Session] = None,
) -> Invoice:
    """
    Validate against the invoice table. ``cancelled`` is reachable from every
    other status and is terminal: any request against a cancelled invoice,
    including a repeated cancel, is rejected. Other same-status requests are
    no-ops.
    """
    with store.unit_of_work(db) as db:
        invoice = store.get_invoice(db, company_id, invoice_id, lock=True)

        if invoice.status == "cancelled":
            raise InvalidTransitionError("Invoice", invoice.id, invoice.status, status, [])

        changed = check_transition(
            INVOICE_TRANSITIONS,
            INVOICE_STATUSES,
            entity="Invoice",
            entity_id=invoice.id,
            current=invoice.status,
            target=status,
        )
        if changed:
            _apply(invoice, status, datetime.now(timezone.utc), actor_id)
        return invoice


def send_invoice(company_id: int, invoice_id: str, **kwargs) -> Invoice:
    return update_invoice_status(company_id, invoice_id, "sent", **kwargs)


def mark_invoice_paid(company_id: int, invoice_id: str, **kwargs) -> Invoice:
    return update_invoice_status(company_id, invoice_id, "paid", **kwargs)


def cancel_invoice(company_id: int, invoice_id: str, **kwargs) -> Invoice:
    return update_invoice_status(company_id, invoice_id, "cancelled", **kwargs)


def mark_overdue_invoices(
    company_id: int,
    *,
    today: Optional[date] = None,
    db: Optional[Session] = None,
) -> List[Invoice]:
    """Move every ``sent`` invoice whose due date has passed to ``overdue``."""
    if today is None:
        today = datetime.now(timezone.utc).date()

    with store.unit_of_work(db) as db:
        rows = (
            db.query(Invoice)
            .filter(
                Invoice.company_id == int(company_id),
                Invoice.status == "sent",
                Invoice.due_date < today,
            )
            .order_by(Invoice.due_date.asc(), Invoice.id.asc())
            .with_for_update()
            .all()
        )

        now = datetime.now(timezone.utc)
        for invoice in rows:
            _apply(invoice, "overdue", now, None)

        if rows:
            logger.info("Invoices marked overdue", extra={"company_id": int(company_id), "count": len(rows)})
        return rows


def get_invoice(company_id: int, invoice_id: str, *, db: Optional[Session] = None) -> Invoice:
    with store.unit_of_work(db) as db:
        return store.get_invoice(db, company_id, invoice_id)


def list_invoices(
    company_id: int,
    *,
    client_id: Optional[str] = None,
    reseller_id: Optional[str] = None,
    status: Optional[str] = None,
    db: Optional[Session] = None,
) -> List[Invoice]:
    with store.unit_of_work(db) as db:
        q = db.query(Invoice).filter(Invoice.company_id == int(company_id))

        if client_id is not None:
            q = q.filter(Invoice.client_id == str(client_id))
        if reseller_id is not None:
            q = q.join(Booking, Booking.id == Invoice.booking_id).filter(Booking.reseller_id == str(reseller_id))
        if status is not None:
            q = q.filter(Invoice.status == str(status))

        return q.order_by(Invoice.issue_date.desc(), Invoice.id.asc()).all()
