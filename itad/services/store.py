"""
Storage port for the lifecycle services.

Every lookup is tenant scoped and raises NotFoundError when the id does not
resolve inside the company. ``lock=True`` loads the row FOR UPDATE so that
operations on the same booking serialize on databases that support row locks.
"""
from contextlib import contextmanager
from typing import Iterator, Optional, Type, TypeVar

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from itad.core.errors import NotFoundError, ServerError
from itad.database import SessionLocal
from itad.models.booking import Booking
from itad.models.commission import Commission
from itad.models.driver import Driver
from itad.models.invoice import Invoice
from itad.models.job import Job
from itad.models.number_sequence import NumberSequence
from itad.models.processing_record import GradingRecord, SanitisationRecord

T = TypeVar("T")


@contextmanager
def unit_of_work(db: Optional[Session] = None) -> Iterator[Session]:
    """
    If db is provided, the caller owns the transaction: nothing is committed or closed here.
    If db is None, a session is opened, committed on success and always closed.
    """
    owns_db = db is None
    if owns_db:
        db = SessionLocal()

    try:
        yield db
        if owns_db:
            db.commit()
    except SQLAlchemyError as exc:
        if not owns_db:
            raise
        db.rollback()
        raise ServerError("Storage failure; the operation was not applied.") from exc
    except Exception:
        if owns_db:
            db.rollback()
        raise
    finally:
        if owns_db:
            db.close()


def _get(db: Session, model: Type[T], label: str, company_id: int, entity_id: str, lock: bool) -> T:
    q = db.query(model).filter(
        model.id == str(entity_id),
        model.company_id == int(company_id),
    )
    if lock:
        q = q.with_for_update()
    row = q.one_or_none()
    if row is None:
        raise NotFoundError(label, str(entity_id))
    return row


def get_booking(db: Session, company_id: int, booking_id: str, *, lock: bool = False) -> Booking:
    return _get(db, Booking, "Booking", company_id, booking_id, lock)


def get_job(db: Session, company_id: int, job_id: str, *, lock: bool = False) -> Job:
    return _get(db, Job, "Job", company_id, job_id, lock)


def get_driver(db: Session, company_id: int, driver_id: str) -> Driver:
    return _get(db, Driver, "Driver", company_id, driver_id, False)


def get_commission(db: Session, company_id: int, commission_id: str, *, lock: bool = False) -> Commission:
    return _get(db, Commission, "Commission", company_id, commission_id, lock)


def get_invoice(db: Session, company_id: int, invoice_id: str, *, lock: bool = False) -> Invoice:
    return _get(db, Invoice, "Invoice", company_id, invoice_id, lock)


def get_sanitisation_record(db: Session, company_id: int, record_id: str) -> SanitisationRecord:
    return _get(db, SanitisationRecord, "Sanitisation record", company_id, record_id, False)


def get_grading_record(db: Session, company_id: int, record_id: str) -> GradingRecord:
    return _get(db, GradingRecord, "Grading record", company_id, record_id, False)


_UPSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def next_sequence(db: Session, prefix: str, width: int = 5) -> str:
    """
    Next human-readable number such as ``INV-2026-00007`` within ``prefix``.

    The counter row is bumped with a single upsert, so concurrent callers are
    serialized on that row until their transaction ends and never share a value.
    """
    dialect = db.get_bind().dialect.name
    insert = _UPSERTS.get(dialect)
    if insert is None:
        raise ServerError(f"Number sequences are not supported on {dialect}.")

    stmt = (
        insert(NumberSequence)
        .values(prefix=prefix, last_value=1)
        .on_conflict_do_update(
            index_elements=[NumberSequence.prefix],
            set_={"last_value": NumberSequence.last_value + 1},
        )
        .returning(NumberSequence.last_value)
    )
    value = db.execute(stmt).scalar_one()
    return f"{prefix}-{str(value).zfill(width)}"
