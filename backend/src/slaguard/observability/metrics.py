"""Prometheus metrics helpers and middleware."""

from __future__ import annotations

import time

from fastapi import FastAPI, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

REQUEST_COUNTER = Counter(
    "sla_http_requests_total",
    "Total HTTP requests processed",
    ["method", "route", "status"],
)

REQUEST_LATENCY = Histogram(
    "sla_http_request_latency_seconds",
    "HTTP request latency in seconds",
    ["method", "route"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)

PASS_COUNTER = Counter(
    "sla_assessment_passes_total",
    "Assessment passes by outcome",
    ["outcome"],
)

AGREEMENT_COUNTER = Counter(
    "sla_agreements_assessed_total",
    "Agreements processed by assessment passes, by outcome",
    ["outcome"],
)

VIOLATION_COUNTER = Counter(
    "sla_violations_total",
    "Guarantee violations detected",
)

PASS_LATENCY = Histogram(
    "sla_assessment_pass_seconds",
    "Duration of a full assessment pass in seconds",
    buckets=(0.05, 0.1, 0.5, 1, 2, 5, 10, 30, 60),
)

PASS_ACTIVE_GAUGE = Gauge(
    "sla_assessment_passes_active",
    "Number of assessment passes currently executing",
)

_configured_apps: set[int] = set()


def configure_metrics_once(app: FastAPI) -> None:
    """Register metrics middleware and endpoint exactly once per app."""

    app_id = id(app)
    if app_id in _configured_apps:
        return

    app.add_middleware(RequestMetricsMiddleware)
    app.add_route("/metrics/prometheus", prometheus_endpoint, methods=["GET"])
    _configured_apps.add(app_id)


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """Collect metrics for each HTTP request."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        route = _safe_route(request)
        if not route.startswith("/metrics"):
            REQUEST_COUNTER.labels(request.method, route, str(response.status_code)).inc()
            REQUEST_LATENCY.labels(request.method, route).observe(duration)

        return response


async def prometheus_endpoint(request=None) -> Response:
    """Return the Prometheus exposition format metrics payload."""

    payload = generate_latest()
    return Response(payload, media_type=CONTENT_TYPE_LATEST)


def record_pass(*, outcome: str, duration: float) -> None:
    PASS_COUNTER.labels(outcome=outcome).inc()
    PASS_LATENCY.observe(duration)


def record_agreement(*, outcome: str, violations: int = 0) -> None:
    AGREEMENT_COUNTER.labels(outcome=outcome).inc()
    if violations:
        VIOLATION_COUNTER.inc(violations)


class assessment_pass_active:
    """Context manager that tracks running assessment passes."""

    def __enter__(self):
        PASS_ACTIVE_GAUGE.inc()

    def __exit__(self, exc_type, exc_val, exc_tb):
        PASS_ACTIVE_GAUGE.dec()
        return False


def _safe_route(request: Request) -> str:
    route = request.scope.get("route")
    if route and getattr(route, "path", None):
        return route.path
    return request.url.path
