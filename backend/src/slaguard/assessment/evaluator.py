"""Guarantee and agreement evaluation against monitoring snapshots."""

from typing import List

import structlog

from slaguard.assessment.expression import Expression
from slaguard.assessment.model import EvaluationGtResult, GuaranteeData, Result
from slaguard.assessment.monitor.base import MonitoringAdapter
from slaguard.models import Agreement, Guarantee, Violation

logger = structlog.get_logger(__name__)


def evaluate_agreement(agreement: Agreement, adapter: MonitoringAdapter) -> Result:
    """
    Evaluate every guarantee of ``agreement``.

    The adapter is bound to the agreement once. The first guarantee that fails
    to evaluate aborts the whole agreement. Only guarantees with at least one
    failed snapshot appear in the result.
    """
    bound = adapter.initialize(agreement)
    result: Result = {}

    for guarantee in agreement.details.guarantees:
        try:
            failed = evaluate_guarantee(agreement, guarantee, bound)
        except Exception as exc:
            logger.warning(
                "assessment.guarantee.error",
                agreement_id=agreement.id,
                guarantee=guarantee.name,
                error=str(exc),
            )
            raise
        if failed:
            result[guarantee.name] = EvaluationGtResult(
                metrics=failed,
                violations=evaluate_gt_violations(agreement, guarantee, failed),
            )
    return result


def evaluate_guarantee(
    agreement: Agreement,
    guarantee: Guarantee,
    adapter: MonitoringAdapter,
) -> GuaranteeData:
    """Return the snapshots at which the guarantee constraint is false."""
    expression = Expression.parse(guarantee.constraint)
    snapshots = adapter.get_values(guarantee, expression.variables())

    failed: GuaranteeData = []
    for snapshot in snapshots:
        params = {name: metric.value for name, metric in snapshot.items()}
        if not expression.evaluate(params):
            failed.append(snapshot)

    logger.debug(
        "assessment.guarantee.evaluated",
        agreement_id=agreement.id,
        guarantee=guarantee.name,
        snapshots=len(snapshots),
        failed=len(failed),
    )
    return failed


def evaluate_gt_violations(
    agreement: Agreement,
    guarantee: Guarantee,
    failed: GuaranteeData,
) -> List[Violation]:
    """One violation per failed snapshot, stamped with its newest reading."""
    violations: List[Violation] = []
    for snapshot in failed:
        values = list(snapshot.values())
        violations.append(
            Violation(
                agreement_id=agreement.id,
                guarantee=guarantee.name,
                constraint=guarantee.constraint,
                timestamp=max((v.timestamp for v in values), default=None),
                values=values,
            )
        )
    return violations
