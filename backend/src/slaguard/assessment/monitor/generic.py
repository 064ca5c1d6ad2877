"""
Configurable monitoring adapter built from a retriever and a processor.

Usage:
    adapter = GenericAdapter(retrieve=RandomRetriever(size=3), process=aggregate)
    bound = adapter.initialize(agreement)
    for guarantee in agreement.details.guarantees:
        snapshots = bound.get_values(guarantee, ["latency"])
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from slaguard.assessment.model import GuaranteeData
from slaguard.assessment.monitor.base import Processor, Retriever
from slaguard.assessment.monitor.interpolation import DEFAULT_MAX_DELTA, mount
from slaguard.models import (
    Agreement,
    AggregationType,
    Guarantee,
    MetricValue,
    Variable,
    utcnow,
)


def identity(variable: Variable, values: List[MetricValue]) -> List[MetricValue]:
    """Return the readings untouched."""
    return values


def aggregate(variable: Variable, values: List[MetricValue]) -> List[MetricValue]:
    """
    Collapse the readings of an aggregated variable into one value.

    Expects the retriever to return only readings inside the aggregation
    window. The result is stamped with the timestamp of the last reading.
    Variables without a known aggregation pass through unchanged.
    """
    aggregation = variable.aggregation
    if not values or aggregation is None or not aggregation.type:
        return values
    if aggregation.type == AggregationType.AVERAGE:
        return [
            MetricValue(
                key=variable.name,
                value=_average(values),
                timestamp=values[-1].timestamp,
            )
        ]
    return values


def _average(values: List[MetricValue]) -> float:
    return sum(float(v.value) for v in values) / len(values)


def get_from_for_variable(variable: Variable, default_from: datetime, to: datetime) -> datetime:
    """
    Start of the query interval for a variable.

    Aggregated variables query only their trailing window; the rest use
    ``default_from`` (the last time the agreement was assessed).
    """
    if variable.aggregation is not None and variable.aggregation.window:
        return to - timedelta(seconds=variable.aggregation.window)
    return default_from


def build_variables(agreement: Agreement, names: Sequence[str]) -> List[Variable]:
    return [agreement.details.get_variable(name) for name in names]


@dataclass(frozen=True)
class GenericAdapter:
    """Monitoring adapter composing a retriever, a processor and the aligner."""

    retrieve: Retriever
    process: Processor = identity
    max_delta: float = DEFAULT_MAX_DELTA
    clock: Callable[[], datetime] = utcnow
    agreement: Optional[Agreement] = None

    def initialize(self, agreement: Agreement) -> "GenericAdapter":
        return dataclasses.replace(self, agreement=agreement)

    def get_values(self, guarantee: Guarantee, variables: Sequence[str]) -> GuaranteeData:
        agreement = self.agreement
        if agreement is None:
            raise RuntimeError("GenericAdapter.get_values called before initialize()")

        to_time = self.clock()
        from_time = agreement.assessment.last_execution or agreement.details.creation

        resolved = build_variables(agreement, variables)
        unprocessed = self.retrieve(agreement, resolved, from_time, to_time)

        # Only returned series are mounted; an omitted variable is absent from every snapshot
        series = {
            variable.name: self.process(variable, list(values))
            for variable, values in unprocessed.items()
        }
        return mount(series, {}, self.max_delta)
