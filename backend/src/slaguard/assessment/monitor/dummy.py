"""Adapter returning random snapshots, handy for smoke-testing a deployment."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from slaguard.assessment.model import ExpressionData, GuaranteeData
from slaguard.models import Agreement, Guarantee, MetricValue, utcnow


class DummyAdapter:
    def __init__(self, size: int, rng: Optional[random.Random] = None, agreement: Optional[Agreement] = None):
        self.size = size
        self.rng = rng or random.Random()
        self.agreement = agreement

    def initialize(self, agreement: Agreement) -> "DummyAdapter":
        return DummyAdapter(self.size, rng=self.rng, agreement=agreement)

    def get_values(self, guarantee: Guarantee, variables: Sequence[str]) -> GuaranteeData:
        result: GuaranteeData = []
        for _ in range(self.size):
            now = utcnow()
            snapshot: ExpressionData = {
                key: MetricValue(key=key, value=self.rng.random(), timestamp=now)
                for key in variables
            }
            result.append(snapshot)
        return result
