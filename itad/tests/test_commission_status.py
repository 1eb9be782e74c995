import pytest

from itad.core.errors import InvalidTransitionError, NotFoundError
from itad.services import booking_lifecycle, commission_service


@pytest.fixture
def commission(graded_booking):
    booking = graded_booking()
    booking_lifecycle.complete_booking(1, booking.id, "admin-user")
    [row] = commission_service.list_commissions(1)
    return row


def test_commission_moves_pending_approved_paid(commission):
    approved = commission_service.update_commission_status(1, commission.id, "approved")
    assert approved.status == "approved"
    assert approved.paid_at is None

    paid = commission_service.update_commission_status(1, commission.id, "paid")
    assert paid.status == "paid"
    assert paid.paid_at is not None


def test_commission_cannot_skip_approval(commission):
    with pytest.raises(InvalidTransitionError) as exc:
        commission_service.update_commission_status(1, commission.id, "paid")

    assert exc.value.allowed_statuses == ["approved"]


def test_paid_commission_is_terminal(commission):
    commission_service.update_commission_status(1, commission.id, "approved")
    commission_service.update_commission_status(1, commission.id, "paid")
    [paid] = commission_service.list_commissions(1)

    again = commission_service.update_commission_status(1, commission.id, "paid")
    assert again.paid_at == paid.paid_at

    with pytest.raises(InvalidTransitionError):
        commission_service.update_commission_status(1, commission.id, "pending")


def test_unknown_commission_status_rejected(commission):
    with pytest.raises(InvalidTransitionError):
        commission_service.update_commission_status(1, commission.id, "refunded")


def test_commission_is_tenant_scoped(commission):
    with pytest.raises(NotFoundError):
        commission_service.update_commission_status(2, commission.id, "approved")


def test_commission_summary_totals(graded_booking):
    first = graded_booking()
    second = graded_booking(reseller_id="reseller-2", reseller_name="Other Channel")
    booking_lifecycle.complete_booking(1, first.id, "admin-user")
    booking_lifecycle.complete_booking(1, second.id, "admin-user")

    mine = commission_service.list_commissions(1, reseller_id="reseller-1")
    assert len(mine) == 1
    commission_service.update_commission_status(1, mine[0].id, "approved")

    summary = commission_service.commission_summary(1)
    amount = mine[0].commission_amount
    assert summary["total_approved"] == amount
    assert summary["total_pending"] == amount
    assert summary["total_paid"] == 0
    assert summary["total_amount"] == amount * 2
    assert sum(summary["by_period"].values()) == amount * 2

    scoped = commission_service.commission_summary(1, reseller_id="reseller-1")
    assert scoped["total_amount"] == amount
    assert scoped["total_pending"] == 0
