"""
Agreement lifecycle state machine.

Supports:
- Transition validity checks (``terminated`` is absorbing)
- Checked transitions returning an audit record
- Forced termination of expired agreements
- Single-agreement assessment bookkeeping
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

import structlog

from slaguard.assessment.evaluator import evaluate_agreement
from slaguard.assessment.model import Result
from slaguard.assessment.monitor.base import MonitoringAdapter
from slaguard.models import Agreement, State, utcnow

logger = structlog.get_logger(__name__)


class InvalidTransitionError(Exception):
    """Raised when an agreement cannot move to the requested state."""

    def __init__(self, agreement_id: str, from_state: State, to_state: State):
        super().__init__(
            f"agreement {agreement_id}: invalid transition {from_state.value} -> {to_state.value}"
        )
        self.agreement_id = agreement_id
        self.from_state = from_state
        self.to_state = to_state


@dataclass
class StateTransition:
    """Record of a state transition."""
    agreement_id: str
    from_state: State
    to_state: State
    timestamp: datetime = field(default_factory=utcnow)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agreement_id": self.agreement_id,
            "from_state": self.from_state.value,
            "to_state": self.to_state.value,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


def is_valid_transition(current: State, new: State) -> bool:
    """Every transition is valid except leaving ``terminated`` (itself included)."""
    return current != State.TERMINATED


def transition(
    agreement: Agreement,
    new_state: State,
    metadata: Optional[Dict[str, Any]] = None,
) -> StateTransition:
    """Move ``agreement`` to ``new_state``, raising InvalidTransitionError if not allowed."""
    current = agreement.state
    if not is_valid_transition(current, new_state):
        raise InvalidTransitionError(agreement.id, current, new_state)
    agreement.state = new_state
    record = StateTransition(
        agreement_id=agreement.id,
        from_state=current,
        to_state=new_state,
        metadata=metadata or {},
    )
    logger.info(
        "agreement.state.changed",
        agreement_id=agreement.id,
        from_state=current.value,
        to_state=new_state.value,
    )
    return record


def terminate_if_expired(agreement: Agreement, now: datetime) -> bool:
    """Force ``terminated`` when the agreement expired before ``now``; report whether it did."""
    expiration = agreement.details.expiration
    if expiration is None or not expiration < now:
        return False
    if agreement.state != State.TERMINATED:
        logger.info(
            "agreement.expired",
            agreement_id=agreement.id,
            expiration=expiration.isoformat(),
            previous_state=agreement.state.value,
        )
    agreement.state = State.TERMINATED
    return True


def assess_agreement(
    agreement: Agreement,
    adapter: MonitoringAdapter,
    now: Optional[datetime] = None,
) -> Result:
    """
    Assess one agreement in place.

    Expired agreements are terminated first. Only started agreements are
    evaluated; their assessment timestamps advance on every evaluation,
    including one that raises. Evaluation errors propagate.
    """
    now = now or utcnow()
    terminate_if_expired(agreement, now)

    if agreement.state != State.STARTED:
        return {}

    try:
        return evaluate_agreement(agreement, adapter)
    finally:
        if agreement.assessment.first_execution is None:
            agreement.assessment.first_execution = now
        agreement.assessment.last_execution = now
