"""Replay adapter returning fixed snapshots, used in tests and demos."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence, Union

from slaguard.assessment.model import GuaranteeData
from slaguard.models import Agreement, Guarantee


class ArrayMonitoringAdapter:
    """
    Replays prepared snapshots.

    ``values`` is either one list replayed for every guarantee, or a mapping
    from guarantee name to its list.
    """

    def __init__(
        self,
        values: Union[GuaranteeData, Mapping[str, GuaranteeData], None] = None,
        agreement: Optional[Agreement] = None,
    ):
        self.values = values if values is not None else []
        self.agreement = agreement

    def initialize(self, agreement: Agreement) -> "ArrayMonitoringAdapter":
        return ArrayMonitoringAdapter(self.values, agreement=agreement)

    def get_values(self, guarantee: Guarantee, variables: Sequence[str]) -> GuaranteeData:
        if isinstance(self.values, Mapping):
            snapshots = self.values.get(guarantee.name, [])
        else:
            snapshots = self.values
        return [dict(snapshot) for snapshot in snapshots]
