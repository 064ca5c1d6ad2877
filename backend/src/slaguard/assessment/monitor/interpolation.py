"""
Alignment of independent metric series into evaluable snapshots.

Each variable of a constraint may be sampled at its own instants. ``mount``
merges the per-variable series into snapshots (one value per variable) using
constant interpolation: a variable with no reading close to the snapshot
instant keeps its last known value.

For ``cpu`` read at t=0s and t=10s and ``mem`` read at t=5s, with no seeded
last values, the candidates are t=0 (discarded, ``mem`` is still unknown),
t=5 -> (cpu@0, mem@5) and t=10 -> (cpu@10, mem@5).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Tuple

import structlog

from slaguard.assessment.model import ExpressionData, GuaranteeData
from slaguard.models import MetricValue

logger = structlog.get_logger(__name__)

# Maximum distance, in seconds, for readings to be merged in one snapshot
DEFAULT_MAX_DELTA = 0.1


@dataclass
class MountContext:
    """
    Per-merge state: cursors, series lengths and last known values.

    Only ``index`` and ``last`` change while merging. A context is built for a
    single guarantee evaluation and must not be shared.
    """

    values: Mapping[str, Sequence[MetricValue]]
    last: Dict[str, MetricValue] = field(default_factory=dict)
    max_delta: float = DEFAULT_MAX_DELTA
    index: Dict[str, int] = field(init=False)
    lens: Dict[str, int] = field(init=False)

    def __post_init__(self):
        self.last = dict(self.last)
        self.index = {name: 0 for name in self.values}
        self.lens = {name: len(series) for name, series in self.values.items()}

    @property
    def sum_lens(self) -> int:
        return sum(self.lens.values())

    def exhausted(self) -> bool:
        return all(self.index[name] == self.lens[name] for name in self.index)

    def current_value(self, name: str) -> Optional[MetricValue]:
        """
        Value under the cursor of a series.

        None stands for a reading at the infinite future: the series is empty
        or already consumed.
        """
        i = self.index[name]
        if i == self.lens[name]:
            return None
        return self.values[name][i]

    def find_next_point(self) -> Optional[MetricValue]:
        """Earliest current value across all series; ties go to iteration order."""
        result: Optional[MetricValue] = None
        for name in self.values:
            point = self.current_value(name)
            if point is None:
                continue
            if result is None or point.timestamp < result.timestamp:
                result = point
        return result

    def build_next_point_set(self, point: MetricValue) -> Tuple[ExpressionData, bool]:
        """
        Build the snapshot at ``point``; the flag is False when it must be discarded.

        Readings within ``max_delta`` of the point are consumed. Other variables
        take their last known value; a variable without one discards the snapshot.
        """
        data: ExpressionData = {}
        discard = False
        for name in self.values:
            value = self.current_value(name)
            if value is not None and _delta_seconds(point, value) <= self.max_delta:
                data[name] = value
                self.index[name] += 1
                self.last[name] = value
            elif name in self.last:
                data[name] = self.last[name]
            else:
                discard = True
        return data, not discard

    def run(self) -> GuaranteeData:
        """Merge all series into snapshots."""
        result: GuaranteeData = []
        # Every step consumes at least one reading, so sum_lens steps suffice
        # for well-formed input.
        for _ in range(self.sum_lens):
            if self.exhausted():
                break
            point = self.find_next_point()
            if point is None:
                break
            snapshot, ok = self.build_next_point_set(point)
            if ok:
                result.append(snapshot)

        if not self.exhausted():
            logger.warning(
                "mount.iteration_cap_reached",
                series=list(self.values),
                steps=self.sum_lens,
            )
            return []
        return result


def mount(
    values: Mapping[str, Sequence[MetricValue]],
    last_values: Optional[Mapping[str, MetricValue]] = None,
    max_delta: float = DEFAULT_MAX_DELTA,
) -> GuaranteeData:
    """
    Build the snapshots used to evaluate a guarantee from per-variable series.

    Args:
        values: Variable name -> readings sorted ascending by timestamp
        last_values: Optional last known values; copied, never mutated
        max_delta: Tolerance in seconds for readings to share a snapshot

    Returns:
        Snapshots in time order. Unsorted series never crash or loop, but the
        snapshots produced for them are unspecified.
    """
    ctx = MountContext(values=values, last=dict(last_values or {}), max_delta=max_delta)
    return ctx.run()


def _delta_seconds(p1: MetricValue, p2: MetricValue) -> float:
    return abs((p1.timestamp - p2.timestamp).total_seconds())
