import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from itad.core.errors import InvalidTransitionError, ValidationError
from itad.models.booking import Booking, BookingAsset
from itad.services import store, valuation
from itad.services.transitions import check_transition, ordered, run_cascade, table

logger = logging.getLogger(__name__)

BOOKING_STATUSES = (
    "created",
    "scheduled",
    "collected",
    "sanitised",
    "graded",
    "completed",
    "cancelled",
)

BOOKING_TRANSITIONS = table(
    {
        "created": ("scheduled", "cancelled"),
        "scheduled": ("collected", "cancelled"),
        "collected": ("sanitised",),
        "sanitised": ("graded",),
        "graded": ("completed",),
        "completed": (),
        "cancelled": (),
    }
)

# status -> timestamp column stamped the first time the status is reached
MILESTONE_TIMESTAMPS = {
    "scheduled": "scheduled_at",
    "collected": "collected_at",
    "sanitised": "sanitised_at",
    "graded": "graded_at",
    "completed": "completed_at",
    "cancelled": "cancelled_at",
}


def _utc_now():
    return datetime.now(timezone.utc)


def _stamp_milestone(booking: Booking, status: str, now: datetime) -> None:
    column = MILESTONE_TIMESTAMPS.get(status)
    if column is not None and getattr(booking, column) is None:
        setattr(booking, column, now)


def _cascade_to_job(db: Session, booking: Booking, now: datetime) -> None:
    if not booking.job_id:
        return

    from itad.services.job_lifecycle import apply_booking_milestone

    run_cascade(
        db,
        "booking_milestone_to_job",
        lambda: apply_booking_milestone(db, booking.company_id, booking.job_id, booking.status, now),
        booking_id=booking.id,
        job_id=booking.job_id,
        booking_status=booking.status,
    )


def advance_booking(db: Session, booking: Booking, status: str, now: datetime, *, actor_id: Optional[str] = None) -> None:
    """
    Apply an already-validated forward move: status, milestone stamp, job
    cascade and, on completion, reactive billing. Caller owns the transaction.
    """
    previous = booking.status
    booking.status = status
    _stamp_milestone(booking, status, now)

    if status == "completed" and actor_id and not booking.completed_by:
        booking.completed_by = actor_id

    logger.info(
        "Booking status updated",
        extra={"booking_id": booking.id, "from_status": previous, "to_status": status, "actor_id": actor_id},
    )

    _cascade_to_job(db, booking, now)

    if status == "completed":
        from itad.services.billing_service import on_booking_completed

        on_booking_completed(db, booking, now)


def _validate_assets(assets: Iterable[dict]) -> List[dict]:
    lines = list(assets or [])
    if not lines:
        raise ValidationError("At least one asset must be selected.")

    for asset in lines:
        category_id = str(asset.get("category_id") or "")
        quantity = asset.get("quantity")

        if valuation.get_category(category_id) is None:
            raise ValidationError(
                f'Invalid asset category "{category_id}".',
                {"category_id": category_id},
            )
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError(
                f'Invalid quantity for asset category "{category_id}". Quantity must be greater than 0.',
                {"category_id": category_id, "quantity": quantity},
            )
    return lines


def _as_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def create_booking(
    company_id: int,
    *,
    client_id: str,
    client_name: str,
    site_name: str,
    site_address: str,
    postcode: str,
    scheduled_date: datetime,
    assets: Iterable[dict],
    reseller_id: Optional[str] = None,
    reseller_name: Optional[str] = None,
    site_id: Optional[str] = None,
    contact_name: Optional[str] = None,
    contact_phone: Optional[str] = None,
    charity_percent: Optional[int] = None,
    created_by: Optional[str] = None,
    db: Optional[Session] = None,
) -> Booking:
    if not site_name or not site_address or not postcode:
        raise ValidationError("Site name, address, and postcode are required.")

    if scheduled_date is None:
        raise ValidationError("Scheduled date is required.")

    now = _utc_now()
    if _as_aware(scheduled_date) < now:
        raise ValidationError("Scheduled date must be in the future.")

    lines = _validate_assets(assets)

    charity = 0 if charity_percent is None else int(charity_percent)
    if charity < 0 or charity > 100:
        raise ValidationError(
            "Charity percentage must be between 0 and 100.",
            {"charity_percent": charity},
        )

    with store.unit_of_work(db) as db:
        booking_number = store.next_sequence(db, f"BK-{now.year}")

        booking = Booking(
            company_id=int(company_id),
            booking_number=booking_number,
            status="created",
            client_id=str(client_id),
            client_name=client_name,
            reseller_id=reseller_id,
            reseller_name=reseller_name,
            site_id=site_id,
            site_name=site_name,
            site_address=site_address,
            postcode=postcode,
            contact_name=contact_name,
            contact_phone=contact_phone,
            scheduled_date=scheduled_date,
            estimated_co2e=valuation.calculate_reuse_co2e(lines),
            estimated_buyback=valuation.calculate_buyback_estimate(lines),
            charity_percent=charity,
            created_by=created_by,
            created_at=now,
            assets=[
                BookingAsset(
                    category_id=str(a["category_id"]),
                    category_name=valuation.get_category(str(a["category_id"])).name,
                    quantity=int(a["quantity"]),
                )
                for a in lines
            ],
        )
        db.add(booking)
        db.flush()

        logger.info(
            "Booking created",
            extra={"booking_id": booking.id, "booking_number": booking.booking_number, "company_id": int(company_id)},
        )
        return booking


def assign_driver(
    company_id: int,
    booking_id: str,
    driver_id: str,
    actor_id: str,
    *,
    db: Optional[Session] = None,
) -> Booking:
    with store.unit_of_work(db) as db:
        booking = store.get_booking(db, company_id, booking_id, lock=True)

        if booking.status != "created":
            raise InvalidTransitionError(
                "Booking",
                booking.id,
                booking.status,
                "scheduled",
                ordered(BOOKING_TRANSITIONS[booking.status], BOOKING_STATUSES),
                hint='. Only "created" bookings can be assigned a driver',
            )

        driver = store.get_driver(db, company_id, driver_id)
        if not driver.is_active:
            raise ValidationError(
                f'Driver "{driver.name}" is inactive and cannot be assigned.',
                {"driver_id": driver.id},
            )

        now = _utc_now()

        booking.status = "scheduled"
        booking.driver_id = driver.id
        booking.driver_name = driver.name
        booking.scheduled_by = actor_id
        _stamp_milestone(booking, "scheduled", now)

        if not booking.job_id:
            from itad.services.job_lifecycle import create_job_for_booking

            create_job_for_booking(db, booking, driver, now)

        logger.info(
            "Driver assigned to booking",
            extra={"booking_id": booking.id, "driver_id": driver.id, "job_id": booking.job_id, "actor_id": actor_id},
        )
        return booking


def update_booking_status(
    company_id: int,
    booking_id: str,
    status: str,
    *,
    actor_id: Optional[str] = None,
    db: Optional[Session] = None,
) -> Booking:
    with store.unit_of_work(db) as db:
        booking = store.get_booking(db, company_id, booking_id, lock=True)

        changed = check_transition(
            BOOKING_TRANSITIONS,
            BOOKING_STATUSES,
            entity="Booking",
            entity_id=booking.id,
            current=booking.status,
            target=status,
        )
        if changed:
            advance_booking(db, booking, status, _utc_now(), actor_id=actor_id)

        return booking


def complete_booking(
    company_id: int,
    booking_id: str,
    actor_id: str,
    *,
    db: Optional[Session] = None,
) -> Booking:
    """Complete a graded booking. Repeating the call on a completed booking is a no-op."""
    with store.unit_of_work(db) as db:
        booking = store.get_booking(db, company_id, booking_id, lock=True)

        if booking.status == "completed":
            return booking

        if booking.status != "graded":
            raise InvalidTransitionError(
                "Booking",
                booking.id,
                booking.status,
                "completed",
                ordered(BOOKING_TRANSITIONS[booking.status], BOOKING_STATUSES),
                hint='. Only "graded" bookings can be completed',
            )

        advance_booking(db, booking, "completed", _utc_now(), actor_id=actor_id)
        return booking


def cancel_booking(
    company_id: int,
    booking_id: str,
    *,
    actor_id: Optional[str] = None,
    db: Optional[Session] = None,
) -> Booking:
    return update_booking_status(company_id, booking_id, "cancelled", actor_id=actor_id, db=db)


def sync_collected_from_job(db: Session, company_id: int, booking_id: str, now: datetime) -> bool:
    """Job reached ``collected``: a ``scheduled`` booking follows. Caller owns the transaction."""
    booking = store.get_booking(db, company_id, booking_id, lock=True)

    if booking.status != "scheduled":
        logger.info(
            "Booking not scheduled; collected sync skipped",
            extra={"booking_id": booking.id, "booking_status": booking.status},
        )
        return False

    booking.status = "collected"
    _stamp_milestone(booking, "collected", now)
    db.flush()
    return True


def resync_booking(
    company_id: int,
    booking_id: str,
    *,
    actor_id: Optional[str] = None,
    db: Optional[Session] = None,
) -> Booking:
    """
    Reconcile a booking with its records and job after out-of-order updates.

    Re-runs the sanitisation/grading completeness triggers, re-applies the
    job milestone for the booking's current status and, for a completed
    booking, recreates a missing commission or invoice. Only ever moves forward.
    """
    from itad.services import processing_service

    with store.unit_of_work(db) as db:
        booking = store.get_booking(db, company_id, booking_id, lock=True)
        now = _utc_now()

        if booking.status == "collected" and processing_service.is_fully_sanitised(db, booking):
            advance_booking(db, booking, "sanitised", now, actor_id=actor_id)

        if booking.status == "sanitised" and processing_service.is_fully_graded(db, booking):
            advance_booking(db, booking, "graded", now, actor_id=actor_id)

        if booking.job_id:
            from itad.services.job_lifecycle import BOOKING_MILESTONE_CASCADE, apply_booking_milestone

            # walk the job forward through every milestone the booking has already passed
            reached = BOOKING_STATUSES.index(booking.status) if booking.status != "cancelled" else -1
            for milestone in ("sanitised", "graded", "completed"):
                if reached < BOOKING_STATUSES.index(milestone):
                    break
                run_cascade(
                    db,
                    "resync_job_milestone",
                    lambda m=milestone: apply_booking_milestone(db, company_id, booking.job_id, m, now),
                    booking_id=booking.id,
                    job_id=booking.job_id,
                    milestone=milestone,
                )

        if booking.status == "completed":
            from itad.services.billing_service import on_booking_completed

            on_booking_completed(db, booking, now)

        logger.info("Booking resynced", extra={"booking_id": booking.id, "booking_status": booking.status})
        return booking


def get_booking(company_id: int, booking_id: str, *, db: Optional[Session] = None) -> Booking:
    with store.unit_of_work(db) as db:
        return store.get_booking(db, company_id, booking_id)


def list_bookings(
    company_id: int,
    *,
    client_id: Optional[str] = None,
    reseller_id: Optional[str] = None,
    driver_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    db: Optional[Session] = None,
) -> List[Booking]:
    with store.unit_of_work(db) as db:
        q = db.query(Booking).filter(Booking.company_id == int(company_id))

        if client_id is not None:
            q = q.filter(Booking.client_id == str(client_id))
        if reseller_id is not None:
            q = q.filter(Booking.reseller_id == str(reseller_id))
        if driver_id is not None:
            q = q.filter(Booking.driver_id == str(driver_id))
        if status is not None:
            q = q.filter(Booking.status == str(status))

        return (
            q.order_by(Booking.created_at.desc(), Booking.id.asc())
            .offset(int(offset))
            .limit(int(limit))
            .all()
        )
