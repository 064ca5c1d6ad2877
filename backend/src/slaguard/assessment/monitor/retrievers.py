"""Retrievers fetching raw readings from monitoring sources."""

from __future__ import annotations

import random
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional, Sequence

import requests
import structlog

from slaguard.assessment.monitor.generic import get_from_for_variable
from slaguard.models import Agreement, MetricValue, Variable

logger = structlog.get_logger(__name__)


class RandomRetriever:
    """Synthetic source returning ``size`` random readings per variable, evenly spaced."""

    def __init__(self, size: int = 3, rng: Optional[random.Random] = None):
        self.size = size
        self.rng = rng or random.Random()

    def __call__(
        self,
        agreement: Agreement,
        variables: Sequence[Variable],
        from_time: datetime,
        to_time: datetime,
    ) -> Dict[Variable, List[MetricValue]]:
        result: Dict[Variable, List[MetricValue]] = {}
        for variable in variables:
            actual_from = get_from_for_variable(variable, from_time, to_time)
            step = (to_time - actual_from) / (self.size + 1)
            result[variable] = [
                MetricValue(
                    key=variable.name,
                    value=self.rng.random(),
                    timestamp=actual_from + step * (i + 1),
                )
                for i in range(self.size)
            ]
        return result


class PrometheusRetriever:
    """Reads variables from the Prometheus HTTP range query API."""

    def __init__(
        self,
        base_url: str,
        *,
        step: int = 15,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.step = step
        self.timeout = timeout
        self.session = session or requests.Session()

    def __call__(
        self,
        agreement: Agreement,
        variables: Sequence[Variable],
        from_time: datetime,
        to_time: datetime,
    ) -> Dict[Variable, List[MetricValue]]:
        result: Dict[Variable, List[MetricValue]] = {}
        for variable in variables:
            start = get_from_for_variable(variable, from_time, to_time)
            try:
                payload = self._query_range(variable.metric, start, to_time)
            except (requests.RequestException, ValueError) as exc:
                # The aligner discards snapshots lacking this variable
                logger.warning(
                    "retriever.prometheus.failed",
                    agreement_id=agreement.id,
                    variable=variable.name,
                    error=str(exc),
                )
                result[variable] = []
                continue
            result[variable] = parse_matrix(variable.name, payload)
        return result

    def _query_range(self, query: str, start: datetime, end: datetime) -> Dict[str, Any]:
        response = self.session.get(
            f"{self.base_url}/api/v1/query_range",
            params={
                "query": query,
                "start": start.timestamp(),
                "end": end.timestamp(),
                "step": self.step,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        if payload.get("status") != "success":
            raise ValueError(payload.get("error") or "Prometheus query failed")
        return payload


def parse_matrix(key: str, payload: Dict[str, Any]) -> List[MetricValue]:
    """
    Convert a Prometheus matrix response into readings sorted by time.

    Only the first series is used. A query matching several label sets logs
    ``retriever.prometheus.multiple_series`` and the other series are ignored;
    the query should aggregate them (``avg(...)``, ``sum(...)``) instead.
    """
    result = payload.get("data", {}).get("result", [])
    if not result:
        return []
    if len(result) > 1:
        logger.warning(
            "retriever.prometheus.multiple_series",
            variable=key,
            series=len(result),
            used=result[0].get("metric", {}),
        )
    values = [
        MetricValue(
            key=key,
            value=float(raw),
            timestamp=datetime.fromtimestamp(float(timestamp), UTC),
        )
        for timestamp, raw in result[0].get("values", [])
    ]
    values.sort(key=lambda v: v.timestamp)
    return values
