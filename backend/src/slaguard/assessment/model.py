"""Result types shared by the assessment engine, adapters and notifiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from slaguard.models import MetricValue, Violation

# The values needed to evaluate an expression at a single instant (a snapshot)
ExpressionData = Dict[str, MetricValue]

# Successive snapshots at which a guarantee constraint is evaluated
GuaranteeData = List[ExpressionData]


@dataclass
class EvaluationGtResult:
    """Failed snapshots of one guarantee term and the violations raised for them."""
    metrics: GuaranteeData = field(default_factory=list)
    violations: List[Violation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, list]:
        return {
            "metrics": [
                {name: value.to_dict() for name, value in snapshot.items()}
                for snapshot in self.metrics
            ],
            "violations": [v.to_dict() for v in self.violations],
        }


# Guarantee name -> result; only guarantees with at least one failure are present
Result = Dict[str, EvaluationGtResult]


def has_violations(result: Result) -> bool:
    return any(gt_result.violations for gt_result in result.values())


def all_violations(result: Result) -> List[Violation]:
    return [v for gt_result in result.values() for v in gt_result.violations]
