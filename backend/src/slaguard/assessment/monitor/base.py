"""Contracts implemented by monitoring adapters and metric sources."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, List, Protocol, Sequence

from slaguard.assessment.model import GuaranteeData
from slaguard.models import Agreement, Guarantee, MetricValue, Variable


class MonitoringAdapter(Protocol):
    """Supplies the snapshots needed to evaluate the guarantees of one agreement."""

    def initialize(self, agreement: Agreement) -> "MonitoringAdapter":
        """Return a copy of the adapter bound to ``agreement`` with fresh cursors."""
        ...

    def get_values(self, guarantee: Guarantee, variables: Sequence[str]) -> GuaranteeData:
        """Return the ordered snapshots for the variables of ``guarantee``."""
        ...


class Retriever(Protocol):
    """Fetches raw readings per variable over a time window from a monitoring source."""

    def __call__(
        self,
        agreement: Agreement,
        variables: Sequence[Variable],
        from_time: datetime,
        to_time: datetime,
    ) -> Dict[Variable, List[MetricValue]]:
        ...


class Processor(Protocol):
    """Transforms the raw readings of one variable (e.g. windowed aggregation)."""

    def __call__(self, variable: Variable, values: List[MetricValue]) -> List[MetricValue]:
        ...


# Builds a new, unshared adapter for every agreement assessed in a pass
AdapterFactory = Callable[[], MonitoringAdapter]
