import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from itad.models.commission import Commission
from itad.services import store
from itad.services.transitions import check_transition, table

logger = logging.getLogger(__name__)

COMMISSION_STATUSES = ("pending", "approved", "paid")

COMMISSION_TRANSITIONS = table(
    {
        "pending": ("approved",),
        "approved": ("paid",),
        "paid": (),
    }
)


def update_commission_status(
    company_id: int,
    commission_id: str,
    status: str,
    *,
    actor_id: Optional[str] = None,
    db: Optional[Session] = None,
) -> Commission:
    with store.unit_of_work(db) as db:
        commission = store.get_commission(db, company_id, commission_id, lock=True)

        changed = check_transition(
            COMMISSION_TRANSITIONS,
            COMMISSION_STATUSES,
            entity="Commission",
            entity_id=commission.id,
            current=commission.status,
            target=status,
        )
        if not changed:
            return commission

        previous = commission.status
        commission.status = status
        if status == "paid" and commission.paid_at is None:
            commission.paid_at = datetime.now(timezone.utc)

        logger.info(
            "Commission status updated",
            extra={"commission_id": commission.id, "from_status": previous, "to_status": status, "actor_id": actor_id},
        )
        return commission


def list_commissions(
    company_id: int,
    *,
    reseller_id: Optional[str] = None,
    status: Optional[str] = None,
    period: Optional[str] = None,
    db: Optional[Session] = None,
) -> List[Commission]:
    with store.unit_of_work(db) as db:
        q = db.query(Commission).filter(Commission.company_id == int(company_id))

        if reseller_id is not None:
            q = q.filter(Commission.reseller_id == str(reseller_id))
        if status is not None:
            q = q.filter(Commission.status == str(status))
        if period is not None:
            q = q.filter(Commission.period == str(period))

        return q.order_by(Commission.created_at.desc(), Commission.id.asc()).all()


def commission_summary(
    company_id: int,
    *,
    reseller_id: Optional[str] = None,
    db: Optional[Session] = None,
) -> Dict:
    rows = list_commissions(company_id, reseller_id=reseller_id, db=db)

    by_status = {s: 0 for s in COMMISSION_STATUSES}
    by_period: Dict[str, int] = {}
    for c in rows:
        by_status[c.status] = by_status.get(c.status, 0) + int(c.commission_amount)
        by_period[c.period] = by_period.get(c.period, 0) + int(c.commission_amount)

    return {
        "total_pending": by_status["pending"],
        "total_approved": by_status["approved"],
        "total_paid": by_status["paid"],
        "total_amount": sum(by_status.values()),
        "by_period": dict(sorted(by_period.items())),
    }
