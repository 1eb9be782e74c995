from fastapi.testclient import TestClient

from conftest import auth_headers
from itad.main import app

client = TestClient(app)


def test_driver_sees_only_own_jobs(scheduled_booking):
    mine = scheduled_booking()
    other = scheduled_booking()

    headers = auth_headers(client, user_id="driver-user", role="driver", org_id=mine.driver_id)

    r = client.get("/jobs", headers=headers)
    assert r.status_code == 200
    assert [j["id"] for j in r.json()] == [mine.job_id]

    r = client.get(f"/jobs/{other.job_id}", headers=headers)
    assert r.status_code == 404

    r = client.post(f"/jobs/{other.job_id}/status", json={"status": "en-route"}, headers=headers)
    assert r.status_code == 404


def test_job_transition_error_payload(scheduled_booking):
    booking = scheduled_booking()
    headers = auth_headers(client)

    r = client.post(f"/jobs/{booking.job_id}/status", json={"status": "collected"}, headers=headers)
    assert r.status_code == 400
    body = r.json()
    assert body["entity"] == "Job"
    assert body["current_status"] == "routed"
    assert body["allowed_statuses"] == ["en-route"]


def test_record_evidence_endpoint(scheduled_booking):
    booking = scheduled_booking()
    headers = auth_headers(client, user_id="driver-user", role="driver", org_id=booking.driver_id)

    r = client.post(
        f"/jobs/{booking.job_id}/evidence",
        json={"photos": ["front.jpg"], "signature": "data:image/png;base64,AAAA", "seal_numbers": ["S-77"]},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["evidence"]["seal_numbers"] == ["S-77"]


def test_job_endpoints_reject_other_company(scheduled_booking):
    booking = scheduled_booking()
    headers = {**auth_headers(client), "X-Company-Id": "2"}

    for r in (
        client.get("/jobs", headers=headers),
        client.get(f"/jobs/{booking.job_id}", headers=headers),
        client.post(f"/jobs/{booking.job_id}/status", json={"status": "en-route"}, headers=headers),
        client.post(f"/jobs/{booking.job_id}/evidence", json={"photos": ["a.jpg"]}, headers=headers),
    ):
        assert r.status_code == 403
        assert "Company mismatch" in r.text


def test_clients_cannot_list_jobs(scheduled_booking):
    scheduled_booking()
    headers = auth_headers(client, user_id="client-user", role="client", org_id="client-1")

    r = client.get("/jobs", headers=headers)
    assert r.status_code == 403


def test_resale_value_calculator():
    headers = auth_headers(client, user_id="client-user", role="client", org_id="client-1")

    r = client.get("/grading/resale-value", params={"category": "server", "grade": "C", "quantity": 2}, headers=headers)
    assert r.status_code == 200
    assert r.json()["resale_value"] == 200

    r = client.get("/grading/resale-value", params={"category": "server", "grade": "Z"}, headers=headers)
    assert r.status_code == 400
