import os
_default_test_secret = "test-jwt-secret-for-pytest-only-0000000000000000"
if len(os.environ.get("JWT_SECRET", "")) < 32:
    os.environ["JWT_SECRET"] = _default_test_secret
os.environ.setdefault("ENV", "test")

import subprocess
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url

_default_database_url = f"sqlite:///{Path(tempfile.gettempdir()) / 'itad_lifecycle_test.db'}"
TEST_DATABASE_URL = os.getenv("DATABASE_URL", _default_database_url)
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from itad import database, models  # noqa: E402
from itad.services import booking_lifecycle, job_lifecycle, processing_service  # noqa: E402


def _get_access_token(client, company_id: int, user_id: str = "test", role: str = "admin", org_id=None) -> str:
    body = {"user_id": user_id, "company_id": company_id, "role": role}
    if org_id is not None:
        body["org_id"] = org_id
    resp = client.post("/auth/token", json=body)
    assert resp.status_code == 200, f"token request failed: {resp.status_code} {resp.text}"
    data = resp.json()
    assert "access_token" in data, f"token response missing access_token: {data}"
    return data["access_token"]


def auth_headers(client, company_id: int = 1, **kwargs) -> dict:
    token = _get_access_token(client, company_id, **kwargs)
    return {"Authorization": f"Bearer {token}", "X-Company-Id": str(company_id)}


def future(days: int = 7) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


def _ensure_database_exists(database_url: str) -> None:
    url = make_url(database_url)

    if not url.drivername.startswith("postgresql"):
        return

    db_name = url.database
    admin_url = url.set(database="postgres")
    admin_engine = create_engine(admin_url, isolation_level="AUTOCOMMIT")

    try:
        with admin_engine.connect() as conn:
            exists = conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": db_name},
            ).scalar()
            if not exists:
                safe_db_name = db_name.replace('"', '""')
                conn.execute(text(f'CREATE DATABASE "{safe_db_name}"'))
    finally:
        admin_engine.dispose()


@pytest.fixture(scope="session", autouse=True)
def _prepare_test_database() -> None:
    database.configure_database()

    if make_url(TEST_DATABASE_URL).drivername.startswith("postgresql"):
        _ensure_database_exists(TEST_DATABASE_URL)

        env = os.environ.copy()
        env["DATABASE_URL"] = TEST_DATABASE_URL
        subprocess.run(
            ["alembic", "upgrade", "head"],
            check=True,
            cwd=Path(__file__).resolve().parents[2],
            env=env,
        )
    else:
        database.Base.metadata.drop_all(bind=database.engine)
        database.Base.metadata.create_all(bind=database.engine)


def _empty_tables() -> None:
    with database.engine.begin() as conn:
        for table in reversed(database.Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(scope="function", autouse=True)
def _empty_tables_between_tests():
    _empty_tables()
    yield
    _empty_tables()


@pytest.fixture
def make_driver():
    def _make(company_id: int = 1, name: str = "Dave Driver", vehicle_reg: str = "AB12 CDE"):
        db = database.SessionLocal()
        try:
            row = models.Driver(
                company_id=company_id,
                name=name,
                phone="07700 900123",
                vehicle_reg=vehicle_reg,
                vehicle_type="van",
                vehicle_fuel_type="diesel",
                is_active=True,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return row
        finally:
            db.close()

    return _make


@pytest.fixture
def make_booking():
    def _make(company_id: int = 1, *, reseller: bool = True, **overrides):
        kwargs = dict(
            client_id="client-1",
            client_name="Acme Ltd",
            site_name="Head Office",
            site_address="1 High Street, Leeds",
            postcode="LS1 4AB",
            scheduled_date=future(),
            assets=[
                {"category_id": "laptop", "quantity": 2},
                {"category_id": "monitor", "quantity": 3},
            ],
            created_by="admin-user",
        )
        if reseller:
            kwargs.update(reseller_id="reseller-1", reseller_name="Channel Partners")
        kwargs.update(overrides)
        return booking_lifecycle.create_booking(company_id, **kwargs)

    return _make


@pytest.fixture
def scheduled_booking(make_booking, make_driver):
    """A booking with a driver assigned; its job is ``routed``."""

    def _make(company_id: int = 1, **overrides):
        booking = make_booking(company_id, **overrides)
        driver = make_driver(company_id)
        return booking_lifecycle.assign_driver(company_id, booking.id, driver.id, "admin-user")

    return _make


def drive_job(company_id: int, job_id: str, *statuses: str) -> None:
    for status in statuses:
        job_lifecycle.update_job_status(company_id, job_id, status, actor_id="driver-user")


def sanitise_all(company_id: int, booking) -> None:
    for asset in booking.assets:
        processing_service.record_sanitisation(company_id, booking.id, asset.category_id, "blancco", "tech-1")


def grade_all(company_id: int, booking, grade: str = "B") -> None:
    for asset in booking.assets:
        processing_service.record_grading(
            company_id, booking.id, asset.category_id, asset.category_id, grade, "tech-1"
        )


@pytest.fixture
def graded_booking(scheduled_booking):
    """A booking walked through collection, warehouse, sanitisation and grading."""

    def _make(company_id: int = 1, **overrides):
        booking = scheduled_booking(company_id, **overrides)
        drive_job(company_id, booking.job_id, "en-route", "arrived", "collected", "warehouse")
        sanitise_all(company_id, booking)
        grade_all(company_id, booking)
        return booking_lifecycle.get_booking(company_id, booking.id)

    return _make
