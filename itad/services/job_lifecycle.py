import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from itad.core.errors import InvalidTransitionError, ValidationError
from itad.models.booking import Booking
from itad.models.driver import Driver
from itad.models.job import Job, JobAsset
from itad.services import store
from itad.services.transitions import check_transition, run_cascade, table

logger = logging.getLogger(__name__)

JOB_STATUSES = (
    "booked",
    "routed",
    "en-route",
    "arrived",
    "collected",
    "warehouse",
    "sanitised",
    "graded",
    "finalised",
)

# What a driver may set. Later stages are reachable only from booking milestones.
DRIVER_TRANSITIONS = table(
    {
        "booked": ("routed", "en-route"),
        "routed": ("en-route",),
        "en-route": ("arrived",),
        "arrived": ("collected",),
        "collected": ("warehouse",),
    }
)

DRIVER_EDITABLE_STATUSES = frozenset({"routed", "en-route", "arrived", "collected"})
BOOKING_DRIVEN_STATUSES = frozenset({"sanitised", "graded", "finalised"})

# booking status reached -> (job prerequisite, job result)
BOOKING_MILESTONE_CASCADE = {
    "sanitised": ("warehouse", "sanitised"),
    "graded": ("sanitised", "graded"),
    "completed": ("graded", "finalised"),
}


def _utc_now():
    return datetime.now(timezone.utc)


def create_job_for_booking(db: Session, booking: Booking, driver: Driver, now: datetime) -> Job:
    """Create the booking's job in ``routed`` and link both sides. Caller owns the transaction."""
    erp_job_number = store.next_sequence(db, f"ERP-{now.year}")

    job = Job(
        company_id=booking.company_id,
        erp_job_number=erp_job_number,
        booking_id=booking.id,
        status="routed",
        driver_id=driver.id,
        driver_name=driver.name,
        vehicle_reg=driver.vehicle_reg,
        vehicle_type=driver.vehicle_type,
        driver_phone=driver.phone,
        client_name=booking.client_name,
        site_name=booking.site_name,
        site_address=booking.site_address,
        scheduled_date=booking.scheduled_date,
        co2e_saved=booking.estimated_co2e,
        buyback_value=booking.estimated_buyback,
        charity_percent=booking.charity_percent,
        travel_emissions=0,
        evidence={},
        assets=[JobAsset(category_id=a.category_id, quantity=a.quantity) for a in booking.assets],
    )
    db.add(job)
    db.flush()

    booking.job_id = job.id

    logger.info(
        "Job created for booking",
        extra={"booking_id": booking.id, "job_id": job.id, "driver_id": driver.id},
    )
    return job


def apply_booking_milestone(
    db: Session,
    company_id: int,
    job_id: str,
    booking_status: str,
    now: Optional[datetime] = None,
) -> bool:
    """
    Advance the job for a booking milestone, only when the job is sitting in
    the matching prerequisite status. Anything else is skipped silently.
    """
    step = BOOKING_MILESTONE_CASCADE.get(booking_status)
    if step is None:
        return False

    prerequisite, result = step
    job = store.get_job(db, company_id, job_id, lock=True)

    if job.status != prerequisite:
        logger.info(
            "Job not in prerequisite status; milestone skipped",
            extra={
                "job_id": job.id,
                "job_status": job.status,
                "booking_status": booking_status,
                "expected_job_status": prerequisite,
            },
        )
        return False

    job.status = result
    if result == "finalised" and job.completed_date is None:
        job.completed_date = now or _utc_now()

    db.flush()
    return True


def update_job_status(
    company_id: int,
    job_id: str,
    status: str,
    *,
    actor_id: Optional[str] = None,
    db: Optional[Session] = None,
) -> Job:
    with store.unit_of_work(db) as db:
        job = store.get_job(db, company_id, job_id, lock=True)

        if status in BOOKING_DRIVEN_STATUSES and status != job.status:
            allowed = DRIVER_TRANSITIONS.get(job.status, frozenset())
            raise InvalidTransitionError(
                "Job",
                job.id,
                job.status,
                status,
                [s for s in JOB_STATUSES if s in allowed],
                hint=f'. "{status}" follows the booking and cannot be set on the job directly',
            )

        changed = check_transition(
            DRIVER_TRANSITIONS,
            JOB_STATUSES,
            entity="Job",
            entity_id=job.id,
            current=job.status,
            target=status,
        )
        if not changed:
            return job

        previous = job.status
        job.status = status

        logger.info(
            "Job status updated",
            extra={"job_id": job.id, "from_status": previous, "to_status": status, "actor_id": actor_id},
        )

        if status == "collected":
            from itad.services.booking_lifecycle import sync_collected_from_job

            now = _utc_now()
            run_cascade(
                db,
                "job_collected_to_booking",
                lambda: sync_collected_from_job(db, company_id, job.booking_id, now),
                job_id=job.id,
                booking_id=job.booking_id,
            )

        return job


def record_evidence(
    company_id: int,
    job_id: str,
    *,
    photos: Optional[List[str]] = None,
    signature: Optional[str] = None,
    seal_numbers: Optional[List[str]] = None,
    notes: Optional[str] = None,
    db: Optional[Session] = None,
) -> Job:
    with store.unit_of_work(db) as db:
        job = store.get_job(db, company_id, job_id, lock=True)

        if job.status not in DRIVER_EDITABLE_STATUSES:
            raise ValidationError(
                f'Cannot record evidence for job in "{job.status}" status.',
                {
                    "id": job.id,
                    "current_status": job.status,
                    "allowed_statuses": [s for s in JOB_STATUSES if s in DRIVER_EDITABLE_STATUSES],
                },
            )

        evidence = dict(job.evidence or {})
        if photos:
            evidence["photos"] = list(evidence.get("photos", [])) + list(photos)
        if seal_numbers:
            evidence["seal_numbers"] = list(evidence.get("seal_numbers", [])) + list(seal_numbers)
        if signature is not None:
            evidence["signature"] = signature
        if notes is not None:
            evidence["notes"] = notes

        job.evidence = evidence
        return job


def mark_asset_sanitised(job: Job, category_id: str, record_id: str) -> None:
    for asset in job.assets:
        if asset.category_id == category_id:
            asset.sanitised = True
            asset.sanitisation_record_id = record_id


def mark_asset_graded(job: Job, category_id: str, grade: str, resale_value: int, record_id: str) -> None:
    for asset in job.assets:
        if asset.category_id == category_id:
            asset.grade = grade
            asset.resale_value = resale_value
            asset.grading_record_id = record_id


def get_job(company_id: int, job_id: str, *, db: Optional[Session] = None) -> Job:
    with store.unit_of_work(db) as db:
        return store.get_job(db, company_id, job_id)


def list_jobs(
    company_id: int,
    *,
    driver_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    db: Optional[Session] = None,
) -> List[Job]:
    with store.unit_of_work(db) as db:
        q = db.query(Job).filter(Job.company_id == int(company_id))

        if driver_id is not None:
            q = q.filter(Job.driver_id == str(driver_id))
        if status is not None:
            q = q.filter(Job.status == str(status))

        return (
            q.order_by(Job.scheduled_date.asc(), Job.id.asc())
            .offset(int(offset))
            .limit(int(limit))
            .all()
        )
