from datetime import date

from fastapi.testclient import TestClient

from conftest import auth_headers
from itad.main import app
from itad.services import booking_lifecycle, commission_service, invoice_service

client = TestClient(app)


def _complete(graded_booking, **overrides):
    booking = graded_booking(**overrides)
    booking_lifecycle.complete_booking(1, booking.id, "admin-user")
    return booking


def test_commission_status_endpoint(graded_booking):
    _complete(graded_booking)
    [commission] = commission_service.list_commissions(1)
    admin = auth_headers(client)

    r = client.post(f"/commissions/{commission.id}/status", json={"status": "approved"}, headers=admin)
    assert r.status_code == 200
    assert r.json()["status"] == "approved"

    r = client.post(f"/commissions/{commission.id}/status", json={"status": "pending"}, headers=admin)
    assert r.status_code == 400
    assert r.json()["allowed_statuses"] == ["paid"]


def test_reseller_summary_is_scoped(graded_booking):
    _complete(graded_booking)
    _complete(graded_booking, reseller_id="reseller-2", reseller_name="Other Channel")

    headers = auth_headers(client, user_id="r-user", role="reseller", org_id="reseller-2")
    r = client.get("/commissions/summary", params={"reseller_id": "reseller-1"}, headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["total_pending"] == 36
    assert body["total_amount"] == 36


def test_reseller_cannot_change_commission_status(graded_booking):
    _complete(graded_booking)
    [commission] = commission_service.list_commissions(1)
    headers = auth_headers(client, user_id="r-user", role="reseller", org_id="reseller-1")

    r = client.post(f"/commissions/{commission.id}/status", json={"status": "approved"}, headers=headers)
    assert r.status_code == 403


def test_invoice_visibility_by_role(graded_booking):
    mine = _complete(graded_booking, client_id="client-1")
    _complete(graded_booking, client_id="client-2", reseller=False)
    invoice = next(i for i in invoice_service.list_invoices(1) if i.booking_id == mine.id)

    client_headers = auth_headers(client, user_id="c-user", role="client", org_id="client-2")
    assert client.get(f"/invoices/{invoice.id}", headers=client_headers).status_code == 404
    assert len(client.get("/invoices", headers=client_headers).json()) == 1

    reseller_headers = auth_headers(client, user_id="r-user", role="reseller", org_id="reseller-1")
    r = client.get(f"/invoices/{invoice.id}", headers=reseller_headers)
    assert r.status_code == 200
    assert r.json()["items"][0]["description"] == "Laptop Collection & Processing (2 units)"
    assert [i["booking_id"] for i in client.get("/invoices", headers=reseller_headers).json()] == [mine.id]


def test_invoice_status_and_overdue_sweep(graded_booking):
    _complete(graded_booking)
    [invoice] = invoice_service.list_invoices(1)
    admin = auth_headers(client)

    r = client.post(f"/invoices/{invoice.id}/status", json={"status": "sent"}, headers=admin)
    assert r.status_code == 200
    assert r.json()["sent_at"] is not None

    far_future = date(invoice.due_date.year + 1, 1, 1)
    r = client.post("/invoices/mark-overdue", json={"today": far_future.isoformat()}, headers=admin)
    assert r.status_code == 200
    assert [i["status"] for i in r.json()] == ["overdue"]

    r = client.post(f"/invoices/{invoice.id}/status", json={"status": "draft"}, headers=admin)
    assert r.status_code == 400
    assert r.json()["allowed_statuses"] == ["paid", "cancelled"]


def test_mark_overdue_without_body(graded_booking):
    _complete(graded_booking)
    admin = auth_headers(client)

    r = client.post("/invoices/mark-overdue", headers=admin)
    assert r.status_code == 200
    assert r.json() == []
