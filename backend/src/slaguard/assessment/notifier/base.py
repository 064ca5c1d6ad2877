"""Violation notifier contract and composition helpers."""

from __future__ import annotations

from typing import Iterable, List, Protocol

import structlog

from slaguard.assessment.model import Result
from slaguard.models import Agreement

logger = structlog.get_logger(__name__)


class NotificationError(RuntimeError):
    """Raised when violations cannot be delivered to their sink."""


class ViolationNotifier(Protocol):
    def notify_violations(self, agreement: Agreement, result: Result) -> None:
        ...


def safe_notify(notifier: ViolationNotifier, agreement: Agreement, result: Result) -> bool:
    """Deliver ``result``; delivery failures are logged and reported as False."""
    try:
        notifier.notify_violations(agreement, result)
    except Exception as exc:
        logger.warning(
            "notification.failed",
            agreement_id=agreement.id,
            notifier=type(notifier).__name__,
            error=str(exc),
        )
        return False
    return True


class CompositeNotifier:
    """Fans a result out to several notifiers; one failing does not stop the others."""

    def __init__(self, notifiers: Iterable[ViolationNotifier]):
        self.notifiers: List[ViolationNotifier] = list(notifiers)

    def notify_violations(self, agreement: Agreement, result: Result) -> None:
        for notifier in self.notifiers:
            safe_notify(notifier, agreement, result)
