from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.testclient import TestClient
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from slaguard.assessment.monitor.array import ArrayMonitoringAdapter
from slaguard.assessment.orchestrator import assess_active_agreements
from slaguard.models import Agreement, Details, Guarantee, Party, State
from slaguard.observability import setup_observability
from slaguard.observability.tracing import configure_tracing
from slaguard.repositories.memory import MemoryRepository


def test_tracing_records_spans_for_requests():
    exporter = InMemorySpanExporter()
    app = FastAPI()

    @app.get("/hello")
    def hello():
        return {"ok": True}

    setup_observability(app, tracing_exporter=exporter)

    client = TestClient(app)
    exporter.clear()
    response = client.get("/hello")
    assert response.status_code == 200

    spans = exporter.get_finished_spans()
    assert spans, "expected at least one span to be exported"
    assert any("/hello" in span.name for span in spans)


def test_assessment_pass_is_traced():
    exporter = InMemorySpanExporter()
    configure_tracing(exporter=exporter)

    details = Details(
        id="a01",
        name="Agreement 01",
        provider=Party(id="p01", name="Provider 01"),
        client=Party(id="c01", name="Client 01"),
        guarantees=[Guarantee(name="gt", constraint="m >= 0")],
    )
    repository = MemoryRepository()
    repository.create_agreement(Agreement(id="a01", name="Agreement 01", details=details, state=State.STARTED))

    class SilentNotifier:
        def notify_violations(self, agreement, result):
            pass

    exporter.clear()
    assess_active_agreements(
        repository,
        lambda: ArrayMonitoringAdapter([]),
        SilentNotifier(),
        now=datetime(2024, 1, 1, tzinfo=UTC),
    )

    assert "assessment.pass" in [span.name for span in exporter.get_finished_spans()]
