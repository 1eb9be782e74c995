from fastapi.testclient import TestClient

from conftest import auth_headers, future
from itad.main import app

client = TestClient(app)


def _booking_payload(**overrides) -> dict:
    payload = {
        "client_id": "client-1",
        "client_name": "Acme Ltd",
        "reseller_id": "reseller-1",
        "reseller_name": "Channel Partners",
        "site_name": "Head Office",
        "site_address": "1 High Street, Leeds",
        "postcode": "LS1 4AB",
        "scheduled_date": future().isoformat(),
        "assets": [
            {"category_id": "laptop", "quantity": 2},
            {"category_id": "monitor", "quantity": 3},
        ],
    }
    payload.update(overrides)
    return payload


def _create_driver(headers) -> dict:
    r = client.post("/drivers", json={"name": "Dave Driver", "vehicle_reg": "AB12 CDE"}, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


def test_admin_creates_and_reads_booking():
    headers = auth_headers(client)

    r = client.post("/bookings", json=_booking_payload(), headers=headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "created"
    assert body["estimated_co2e"] == 1100.0
    assert body["created_by"] == "test"
    assert [a["category_name"] for a in body["assets"]] == ["Laptop", "Monitor"]

    r = client.get(f"/bookings/{body['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json()["booking_number"] == body["booking_number"]


def test_create_booking_validation_error_returns_400():
    headers = auth_headers(client)

    r = client.post("/bookings", json=_booking_payload(assets=[]), headers=headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "At least one asset must be selected."


def test_client_books_for_itself_only():
    headers = auth_headers(client, user_id="client-user", role="client", org_id="client-9")

    r = client.post("/bookings", json=_booking_payload(client_id="client-1"), headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["client_id"] == "client-9"

    admin = auth_headers(client)
    client.post("/bookings", json=_booking_payload(), headers=admin)

    r = client.get("/bookings", headers=headers)
    assert r.status_code == 200
    assert [b["client_id"] for b in r.json()] == ["client-9"]


def test_client_cannot_read_other_clients_booking():
    admin = auth_headers(client)
    booking = client.post("/bookings", json=_booking_payload(), headers=admin).json()

    other = auth_headers(client, user_id="client-user", role="client", org_id="client-9")
    r = client.get(f"/bookings/{booking['id']}", headers=other)
    assert r.status_code == 404


def test_assign_driver_and_invalid_transition_payload():
    headers = auth_headers(client)
    driver = _create_driver(headers)
    booking = client.post("/bookings", json=_booking_payload(), headers=headers).json()

    r = client.post(f"/bookings/{booking['id']}/assign", json={"driver_id": driver["id"]}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "scheduled"
    assert r.json()["job_id"]

    r = client.post(f"/bookings/{booking['id']}/status", json={"status": "graded"}, headers=headers)
    assert r.status_code == 400
    body = r.json()
    assert body["current_status"] == "scheduled"
    assert body["requested_status"] == "graded"
    assert body["allowed_statuses"] == ["collected", "cancelled"]


def test_assign_unknown_driver_404():
    headers = auth_headers(client)
    booking = client.post("/bookings", json=_booking_payload(), headers=headers).json()

    r = client.post(f"/bookings/{booking['id']}/assign", json={"driver_id": "nope"}, headers=headers)
    assert r.status_code == 404
    assert r.json()["entity"] == "Driver"


def test_cancel_booking_endpoint():
    headers = auth_headers(client)
    booking = client.post("/bookings", json=_booking_payload(), headers=headers).json()

    r = client.post(f"/bookings/{booking['id']}/cancel", headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "cancelled"


def test_only_admin_may_transition_bookings():
    admin = auth_headers(client)
    booking = client.post("/bookings", json=_booking_payload(), headers=admin).json()

    reseller = auth_headers(client, user_id="r-user", role="reseller", org_id="reseller-1")
    r = client.post(f"/bookings/{booking['id']}/cancel", headers=reseller)
    assert r.status_code == 403


def test_end_to_end_collection_to_billing():
    admin = auth_headers(client)
    driver = _create_driver(admin)
    booking = client.post("/bookings", json=_booking_payload(), headers=admin).json()
    booking = client.post(
        f"/bookings/{booking['id']}/assign", json={"driver_id": driver["id"]}, headers=admin
    ).json()

    driver_headers = auth_headers(client, user_id="driver-user", role="driver", org_id=driver["id"])
    for status in ("en-route", "arrived", "collected", "warehouse"):
        r = client.post(f"/jobs/{booking['job_id']}/status", json={"status": status}, headers=driver_headers)
        assert r.status_code == 200, r.text

    assert client.get(f"/bookings/{booking['id']}", headers=admin).json()["status"] == "collected"

    for category in ("laptop", "monitor"):
        r = client.post(
            "/sanitisation",
            json={"booking_id": booking["id"], "asset_id": category, "method": "blancco"},
            headers=admin,
        )
        assert r.status_code == 200, r.text
    for category in ("laptop", "monitor"):
        r = client.post(
            "/grading",
            json={"booking_id": booking["id"], "asset_id": category, "asset_category": category, "grade": "B"},
            headers=admin,
        )
        assert r.status_code == 200, r.text

    assert client.get(f"/bookings/{booking['id']}", headers=admin).json()["status"] == "graded"

    r = client.post(f"/bookings/{booking['id']}/complete", headers=admin)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "completed"

    r = client.post(f"/bookings/{booking['id']}/complete", headers=admin)
    assert r.status_code == 200

    job = client.get(f"/jobs/{booking['job_id']}", headers=driver_headers).json()
    assert job["status"] == "finalised"

    client_headers = auth_headers(client, user_id="client-user", role="client", org_id="client-1")
    invoices = client.get("/invoices", headers=client_headers).json()
    assert len(invoices) == 1
    assert invoices[0]["status"] == "draft"

    reseller_headers = auth_headers(client, user_id="r-user", role="reseller", org_id="reseller-1")
    commissions = client.get("/commissions", headers=reseller_headers).json()
    assert len(commissions) == 1
    assert commissions[0]["commission_amount"] == 36


def test_resync_endpoint():
    headers = auth_headers(client)
    booking = client.post("/bookings", json=_booking_payload(), headers=headers).json()

    r = client.post(f"/bookings/{booking['id']}/resync", headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "created"
