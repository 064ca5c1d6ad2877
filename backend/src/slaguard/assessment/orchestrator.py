"""
Assessment pass over every active agreement.

Usage:
    summary = assess_active_agreements(
        repository,
        adapter_factory=lambda: GenericAdapter(retrieve=RandomRetriever()),
        notifier=LogNotifier(),
    )
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Dict, List, Optional

import structlog
from opentelemetry import context as otel_context

from slaguard.assessment.lifecycle import assess_agreement
from slaguard.assessment.model import all_violations
from slaguard.assessment.monitor.base import AdapterFactory
from slaguard.assessment.notifier.base import ViolationNotifier, safe_notify
from slaguard.models import Agreement, State, utcnow
from slaguard.observability.metrics import assessment_pass_active, record_agreement, record_pass
from slaguard.observability.tracing import get_tracer
from slaguard.repositories.base import Repository, RepositoryError

logger = structlog.get_logger(__name__)

ACTIVE_STATES = (State.STARTED, State.STOPPED)


@dataclass
class AgreementOutcome:
    agreement_id: str
    status: str  # "ok", "violated" or "failed"
    state: State
    violations: int = 0


@dataclass
class AssessmentSummary:
    assessed: int = 0
    violated: int = 0
    failed: int = 0
    violations: int = 0

    def add(self, outcome: AgreementOutcome) -> None:
        self.assessed += 1
        self.violations += outcome.violations
        if outcome.status == "violated":
            self.violated += 1
        elif outcome.status == "failed":
            self.failed += 1

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def assess_active_agreements(
    repository: Repository,
    adapter_factory: AdapterFactory,
    notifier: ViolationNotifier,
    now: Optional[datetime] = None,
    max_workers: int = 1,
) -> AssessmentSummary:
    """
    Assess every started or stopped agreement once.

    A repository failure listing agreements aborts the pass. Any failure
    assessing one agreement is contained to it; its mutated state is still
    persisted.
    """
    now = now or utcnow()
    summary = AssessmentSummary()
    tracer = get_tracer(__name__)
    start = time.perf_counter()

    with assessment_pass_active(), tracer.start_as_current_span("assessment.pass") as span:
        try:
            agreements = repository.get_agreements_by_state(*ACTIVE_STATES)
        except RepositoryError as exc:
            logger.error("assessment.pass.aborted", error=str(exc))
            span.set_attribute("assessment.outcome", "aborted")
            record_pass(outcome="aborted", duration=time.perf_counter() - start)
            return summary

        parent = otel_context.get_current()

        def run(agreement: Agreement) -> AgreementOutcome:
            return assess_one(agreement, repository, adapter_factory, notifier, now, parent)

        if max_workers > 1 and len(agreements) > 1:
            with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="assessment") as pool:
                outcomes: List[AgreementOutcome] = list(pool.map(run, agreements))
        else:
            outcomes = [run(agreement) for agreement in agreements]

        for outcome in outcomes:
            summary.add(outcome)

        span.set_attribute("assessment.outcome", "completed")
        span.set_attribute("assessment.agreements", summary.assessed)
        span.set_attribute("assessment.violations", summary.violations)

    duration = time.perf_counter() - start
    record_pass(outcome="completed", duration=duration)
    logger.info("assessment.pass.completed", duration_ms=round(duration * 1000, 3), **summary.to_dict())
    return summary


def assess_one(
    agreement: Agreement,
    repository: Repository,
    adapter_factory: AdapterFactory,
    notifier: ViolationNotifier,
    now: datetime,
    parent_context=None,
) -> AgreementOutcome:
    """Assess a copy of ``agreement``, persist it and notify its violations."""
    tracer = get_tracer(__name__)
    working = agreement.copy()

    with tracer.start_as_current_span("assessment.agreement", context=parent_context) as span:
        span.set_attribute("agreement.id", working.id)
        status = "ok"
        result = {}
        try:
            result = assess_agreement(working, adapter_factory(), now)
        except Exception as exc:
            logger.warning(
                "assessment.agreement.failed",
                agreement_id=working.id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            span.record_exception(exc)
            status = "failed"

        try:
            repository.update_agreement(working)
        except RepositoryError as exc:
            logger.error("assessment.agreement.persist_failed", agreement_id=working.id, error=str(exc))

        violations = all_violations(result)
        if violations:
            status = "violated"
            safe_notify(notifier, working, result)

        span.set_attribute("assessment.status", status)

    record_agreement(outcome=status, violations=len(violations))
    logger.debug(
        "assessment.agreement.completed",
        agreement_id=working.id,
        state=working.state.value,
        status=status,
        violations=len(violations),
    )
    return AgreementOutcome(
        agreement_id=working.id,
        status=status,
        state=working.state,
        violations=len(violations),
    )
