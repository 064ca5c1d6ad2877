"""Structured logging configuration and request middleware."""

from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Optional

import structlog
from fastapi import Request
from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

_logging_configured = False


def configure_logging_once(level: Optional[str] = None) -> None:
    """Configure structlog-backed logging in an idempotent way."""

    global _logging_configured
    if _logging_configured:
        return

    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=True,
    )

    # Route stdlib logging through the same handler
    logging.basicConfig(level=numeric_level, format="%(message)s")

    _logging_configured = True


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attaches a correlation id to each request and echoes it back."""

    def __init__(self, app, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[self.header_name] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that emits a structured log entry for every request."""

    def __init__(self, app, logger_name: str = "api.request"):
        super().__init__(app)
        self.logger = structlog.get_logger(logger_name)

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        status: Optional[int] = None

        with structlog.contextvars.bound_contextvars(method=request.method, path=request.url.path):
            try:
                response = await call_next(request)
                status = response.status_code
                return response
            finally:
                duration = time.perf_counter() - start
                self.logger.info(
                    "request.completed",
                    status=status or 500,
                    duration_ms=round(duration * 1000, 3),
                    correlation_id=getattr(request.state, "correlation_id", None),
                    trace_id=current_trace_id(),
                    span_id=current_span_id(),
                )


def current_trace_id() -> Optional[str]:
    span_context = trace.get_current_span().get_span_context()
    if span_context and span_context.trace_id:
        return format(span_context.trace_id, "032x")
    return None


def current_span_id() -> Optional[str]:
    span_context = trace.get_current_span().get_span_context()
    if span_context and span_context.span_id:
        return format(span_context.span_id, "016x")
    return None
