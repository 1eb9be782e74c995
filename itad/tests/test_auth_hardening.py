import os
from datetime import datetime, timedelta, timezone

import jwt
from fastapi.testclient import TestClient

from itad.main import app
from itad.services import booking_lifecycle

client = TestClient(app)


def _mint_token(user_id="dev-user", company_id=1, **claims) -> str:
    # /auth/token requires JWT_SECRET
    os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-pytest-only-0000000000000000")
    r = client.post("/auth/token", json={"user_id": user_id, "company_id": company_id, **claims})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def _headers(token: str, company_id=1) -> dict:
    return {"Authorization": f"Bearer {token}", "X-Company-Id": str(company_id)}


def test_missing_authorization_header_401():
    r = client.get("/bookings", headers={"X-Company-Id": "1"})
    assert r.status_code == 401


def test_wrong_scheme_401():
    token = _mint_token()
    r = client.get("/bookings", headers={"Authorization": f"Basic {token}", "X-Company-Id": "1"})
    assert r.status_code == 401


def test_garbled_bearer_token_401():
    r = client.get("/bookings", headers={"Authorization": "Bearer not-a-real-token", "X-Company-Id": "1"})
    assert r.status_code == 401


def test_missing_company_header_403():
    token = _mint_token()
    r = client.get("/bookings", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403
    assert "X-Company-Id" in r.text


def test_company_mismatch_403():
    token = _mint_token(company_id=1)
    r = client.get("/bookings", headers=_headers(token, company_id=2))
    assert r.status_code == 403
    assert "Company mismatch" in r.text


def test_non_admin_token_requires_org_id():
    r = client.post("/auth/token", json={"user_id": "c", "company_id": 1, "role": "client"})
    assert r.status_code == 400


def test_unknown_role_rejected_at_issue():
    r = client.post("/auth/token", json={"user_id": "c", "company_id": 1, "role": "superuser"})
    assert r.status_code == 400


def test_driver_cannot_manage_drivers():
    token = _mint_token(role="driver", org_id="driver-1")
    r = client.get("/drivers", headers=_headers(token))
    assert r.status_code == 403
    assert "Insufficient role" in r.text


def test_token_without_role_claim_is_rejected(scheduled_booking):
    booking = scheduled_booking()
    token = jwt.encode(
        {"sub": "someone", "company_id": 1, "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        os.environ["JWT_SECRET"],
        algorithm="HS256",
    )
    r = client.post(
        f"/bookings/{booking.id}/status",
        json={"status": "cancelled"},
        headers=_headers(token),
    )
    assert r.status_code == 401
    assert "Invalid token claims" in r.text
    assert booking_lifecycle.get_booking(1, booking.id).status == "scheduled"


def test_token_endpoint_disabled_outside_dev(monkeypatch):
    monkeypatch.setenv("ENV", "production")
    r = client.post("/auth/token", json={"user_id": "x", "company_id": 1})
    assert r.status_code == 404


def test_health_is_public():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
