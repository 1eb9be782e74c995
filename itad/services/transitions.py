import logging
from typing import Callable, Dict, FrozenSet, Mapping

from sqlalchemy.orm import Session

from itad.core.errors import InvalidTransitionError

logger = logging.getLogger(__name__)

TransitionTable = Mapping[str, FrozenSet[str]]


def table(edges: Dict[str, tuple]) -> Dict[str, FrozenSet[str]]:
    return {state: frozenset(targets) for state, targets in edges.items()}


def ordered(allowed: FrozenSet[str], order) -> list:
    return [s for s in order if s in allowed]


def check_transition(
    transitions: TransitionTable,
    order,
    *,
    entity: str,
    entity_id: str,
    current: str,
    target: str,
) -> bool:
    """
    Returns False for a same-status request (idempotent no-op), True when the
    move is legal. Raises InvalidTransitionError otherwise, naming the allowed
    next statuses. Unknown target values are rejected the same way.
    """
    if target == current:
        return False

    allowed = transitions.get(current, frozenset())
    if target not in allowed:
        raise InvalidTransitionError(
            entity,
            entity_id,
            current,
            target,
            ordered(allowed, order),
        )
    return True


def run_cascade(db: Session, step: str, fn: Callable[[], None], **context) -> bool:
    """
    Run one cross-entity sync step inside a SAVEPOINT.

    A failing step is rolled back on its own, logged, and reported as False;
    the caller's primary mutation stays in the outer transaction.
    """
    # primary mutation must fail loudly, not as a cascade failure
    db.flush()
    try:
        with db.begin_nested():
            fn()
        return True
    except Exception:
        logger.exception("Cascade step failed", extra={"step": step, **context})
        return False
