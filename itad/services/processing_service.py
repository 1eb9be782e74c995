"""
Sanitisation and grading records.

Records are append-only evidence, one or more per (booking, asset category).
After each append the booking's completeness predicate is recomputed: when
every asset category on the booking is covered by at least one record and the
booking sits in the prerequisite status, the booking advances (and the job
follows). That follow-up is best-effort; the record is kept even when it fails.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from itad.core.errors import ValidationError
from itad.models.booking import Booking
from itad.models.processing_record import GradingRecord, SanitisationRecord
from itad.services import store, valuation
from itad.services.booking_lifecycle import advance_booking
from itad.services.transitions import run_cascade

logger = logging.getLogger(__name__)

SANITISATION_METHODS = ("blancco", "physical-destruction", "degaussing", "shredding", "other")
GRADES = tuple(valuation.GRADE_MULTIPLIERS.keys())


def _utc_now():
    return datetime.now(timezone.utc)


def _covered_categories(db: Session, model, booking: Booking) -> set:
    rows = (
        db.query(model.asset_id)
        .filter(
            model.company_id == booking.company_id,
            model.booking_id == booking.id,
        )
        .distinct()
        .all()
    )
    return {r[0] for r in rows}


def is_fully_sanitised(db: Session, booking: Booking) -> bool:
    return booking.category_ids() <= _covered_categories(db, SanitisationRecord, booking)


def is_fully_graded(db: Session, booking: Booking) -> bool:
    return booking.category_ids() <= _covered_categories(db, GradingRecord, booking)


def _enrich_job_asset(db: Session, booking: Booking, enrich) -> None:
    if not booking.job_id:
        return
    enrich(store.get_job(db, booking.company_id, booking.job_id, lock=True))
    db.flush()


def _advance_when_complete(
    db: Session,
    company_id: int,
    booking_id: str,
    *,
    prerequisite: str,
    target: str,
    predicate,
    now: datetime,
    actor_id: str,
) -> None:
    booking = store.get_booking(db, company_id, booking_id, lock=True)

    if not predicate(db, booking):
        return

    if booking.status != prerequisite:
        logger.info(
            "Booking not in prerequisite status; completeness advance skipped",
            extra={"booking_id": booking.id, "booking_status": booking.status, "expected_status": prerequisite},
        )
        return

    advance_booking(db, booking, target, now, actor_id=actor_id)


def record_sanitisation(
    company_id: int,
    booking_id: str,
    asset_id: str,
    method: str,
    performed_by: str,
    *,
    method_details: Optional[str] = None,
    notes: Optional[str] = None,
    db: Optional[Session] = None,
) -> SanitisationRecord:
    if method not in SANITISATION_METHODS:
        raise ValidationError(
            f'Invalid sanitisation method "{method}".',
            {"method": method, "allowed_methods": list(SANITISATION_METHODS)},
        )
    if not asset_id:
        raise ValidationError("Asset category is required.")

    with store.unit_of_work(db) as db:
        # serializes completeness checks for this booking
        booking = store.get_booking(db, company_id, booking_id, lock=True)
        now = _utc_now()

        certificate_id = store.next_sequence(db, f"CERT-SANIT-{now.year}", width=3)

        record = SanitisationRecord(
            company_id=int(company_id),
            booking_id=booking.id,
            asset_id=str(asset_id),
            method=method,
            method_details=method_details,
            performed_by=performed_by,
            certificate_id=certificate_id,
            verified=False,
            notes=notes,
            timestamp=now,
        )
        db.add(record)
        db.flush()

        logger.info(
            "Sanitisation recorded",
            extra={"booking_id": booking.id, "record_id": record.id, "asset_id": record.asset_id, "method": method},
        )

        from itad.services.job_lifecycle import mark_asset_sanitised

        run_cascade(
            db,
            "sanitisation_job_asset",
            lambda: _enrich_job_asset(
                db, booking, lambda job: mark_asset_sanitised(job, record.asset_id, record.id)
            ),
            booking_id=booking.id,
            record_id=record.id,
        )
        run_cascade(
            db,
            "sanitisation_completeness",
            lambda: _advance_when_complete(
                db,
                company_id,
                booking.id,
                prerequisite="collected",
                target="sanitised",
                predicate=is_fully_sanitised,
                now=now,
                actor_id=performed_by,
            ),
            booking_id=booking.id,
            record_id=record.id,
        )
        return record


def verify_sanitisation(company_id: int, record_id: str, *, db: Optional[Session] = None) -> SanitisationRecord:
    with store.unit_of_work(db) as db:
        record = store.get_sanitisation_record(db, company_id, record_id)
        record.verified = True
        return record


def record_grading(
    company_id: int,
    booking_id: str,
    asset_id: str,
    asset_category: str,
    grade: str,
    graded_by: str,
    *,
    condition: Optional[str] = None,
    notes: Optional[str] = None,
    db: Optional[Session] = None,
) -> GradingRecord:
    if grade not in GRADES:
        raise ValidationError(
            f'Invalid grade "{grade}".',
            {"grade": grade, "allowed_grades": list(GRADES)},
        )
    if not asset_id:
        raise ValidationError("Asset category is required.")

    with store.unit_of_work(db) as db:
        booking = store.get_booking(db, company_id, booking_id, lock=True)
        now = _utc_now()

        record = GradingRecord(
            company_id=int(company_id),
            booking_id=booking.id,
            asset_id=str(asset_id),
            asset_category=asset_category,
            grade=grade,
            resale_value=valuation.calculate_resale_value(asset_category, grade),
            condition=condition,
            notes=notes,
            graded_by=graded_by,
            graded_at=now,
        )
        db.add(record)
        db.flush()

        logger.info(
            "Grading recorded",
            extra={"booking_id": booking.id, "record_id": record.id, "asset_id": record.asset_id, "grade": grade},
        )

        from itad.services.job_lifecycle import mark_asset_graded

        run_cascade(
            db,
            "grading_job_asset",
            lambda: _enrich_job_asset(
                db,
                booking,
                lambda job: mark_asset_graded(job, record.asset_id, record.grade, record.resale_value, record.id),
            ),
            booking_id=booking.id,
            record_id=record.id,
        )
        run_cascade(
            db,
            "grading_completeness",
            lambda: _advance_when_complete(
                db,
                company_id,
                booking.id,
                prerequisite="sanitised",
                target="graded",
                predicate=is_fully_graded,
                now=now,
                actor_id=graded_by,
            ),
            booking_id=booking.id,
            record_id=record.id,
        )
        return record


def list_sanitisation_records(
    company_id: int,
    *,
    booking_id: Optional[str] = None,
    db: Optional[Session] = None,
) -> List[SanitisationRecord]:
    with store.unit_of_work(db) as db:
        q = db.query(SanitisationRecord).filter(SanitisationRecord.company_id == int(company_id))
        if booking_id is not None:
            q = q.filter(SanitisationRecord.booking_id == str(booking_id))
        return q.order_by(SanitisationRecord.timestamp.asc(), SanitisationRecord.id.asc()).all()


def list_grading_records(
    company_id: int,
    *,
    booking_id: Optional[str] = None,
    db: Optional[Session] = None,
) -> List[GradingRecord]:
    with store.unit_of_work(db) as db:
        q = db.query(GradingRecord).filter(GradingRecord.company_id == int(company_id))
        if booking_id is not None:
            q = q.filter(GradingRecord.booking_id == str(booking_id))
        return q.order_by(GradingRecord.graded_at.asc(), GradingRecord.id.asc()).all()
