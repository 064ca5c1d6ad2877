"""OpenTelemetry tracing helpers."""

from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.requests import RequestsInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

_fastapi_instrumentor = FastAPIInstrumentor()
_requests_instrumented = False
_provider: Optional[TracerProvider] = None
_default_processor_configured = False


def configure_tracing(app: Optional[FastAPI] = None, *, exporter: Optional[SpanExporter] = None) -> TracerProvider:
    """
    Configure the global tracer provider, instrumenting ``app`` and ``requests``.

    Worker processes call this without an app so assessment spans and
    retriever HTTP calls are still traced.
    """

    global _provider, _default_processor_configured, _requests_instrumented

    if _provider is None:
        provider = TracerProvider(
            sampler=TraceIdRatioBased(float(os.getenv("OTEL_SAMPLING_RATIO", "1.0"))),
            resource=Resource.create(
                {
                    "service.name": os.getenv("OTEL_SERVICE_NAME", "sla-guard"),
                    "deployment.environment": os.getenv("ENVIRONMENT", "local"),
                }
            ),
        )
        trace.set_tracer_provider(provider)
        _provider = provider
    else:
        provider = _provider

    if exporter is None and not _default_processor_configured:
        provider.add_span_processor(BatchSpanProcessor(_default_exporter()))
        _default_processor_configured = True
    elif exporter is not None:
        provider.add_span_processor(SimpleSpanProcessor(exporter))

    if app is not None:
        if _fastapi_instrumentor.is_instrumented_by_opentelemetry:
            _fastapi_instrumentor.uninstrument_app(app)
        _fastapi_instrumentor.instrument_app(app, tracer_provider=provider)

    if not _requests_instrumented:
        RequestsInstrumentor().instrument()
        _requests_instrumented = True

    return provider


def get_tracer(name: str = "slaguard") -> trace.Tracer:
    """Return a tracer from the globally configured provider."""

    return trace.get_tracer(name)


def _default_exporter() -> SpanExporter:
    if os.getenv("OTEL_TRACING_CONSOLE", "false").lower() == "true":
        return ConsoleSpanExporter()
    return _NullSpanExporter()


class _NullSpanExporter(SpanExporter):
    """A no-op exporter used when no backend is configured."""

    def export(self, spans):
        return SpanExportResult.SUCCESS

    def shutdown(self):
        return
