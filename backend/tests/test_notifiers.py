import json
from datetime import UTC, datetime

import pytest
import requests

from slaguard.assessment.model import EvaluationGtResult
from slaguard.assessment.notifier import (
    CompositeNotifier,
    LogNotifier,
    NotificationError,
    RepositoryNotifier,
    SlackNotifier,
    WebhookNotifier,
    safe_notify,
)
from slaguard.assessment.notifier.slack import SlackMessage
from slaguard.models import Agreement, Details, MetricValue, Party, Violation
from slaguard.repositories.memory import MemoryRepository

T0 = datetime(2024, 1, 1, tzinfo=UTC)


def make_agreement():
    details = Details(
        id="a01",
        name="Agreement 01",
        provider=Party(id="p01", name="Provider 01"),
        client=Party(id="c01", name="Client 01"),
    )
    return Agreement(id="a01", name="Agreement 01", details=details)


def make_result():
    value = MetricValue(key="m", value=-1, timestamp=T0)
    violation = Violation(
        agreement_id="a01",
        guarantee="gt",
        constraint="m >= 0",
        timestamp=T0,
        values=[value],
    )
    return {"gt": EvaluationGtResult(metrics=[{"m": value}], violations=[violation])}


class DummyResponse:
    def __init__(self, status_code=200, text="ok"):
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(self.text)


def test_log_notifier_emits_one_event_per_violation(monkeypatch):
    events = []

    class DummyLogger:
        def info(self, event, **kwargs):
            events.append((event, kwargs))

    monkeypatch.setattr("slaguard.assessment.notifier.log.logger", DummyLogger())

    LogNotifier().notify_violations(make_agreement(), make_result())

    assert [event for event, _ in events] == ["agreement.violated", "guarantee.violated"]
    assert events[1][1]["values"] == {"m": -1}
    assert events[1][1]["timestamp"] == T0.isoformat()


def test_webhook_notifier_posts_json_payload():
    captured = {}

    class DummySession:
        def post(self, url, json, headers, timeout):
            captured.update(url=url, payload=json, timeout=timeout)
            return DummyResponse()

    notifier = WebhookNotifier("https://hooks.example/sla", session=DummySession(), timeout=2)
    notifier.notify_violations(make_agreement(), make_result())

    assert captured["url"] == "https://hooks.example/sla"
    assert captured["timeout"] == 2
    payload = captured["payload"]
    assert payload["agreement_id"] == "a01"
    assert payload["violation_count"] == 1
    assert payload["guarantees"]["gt"]["violations"][0]["constraint"] == "m >= 0"


def test_webhook_notifier_raises_notification_error():
    class FailingSession:
        def post(self, url, json, headers, timeout):
            return DummyResponse(status_code=500, text="boom")

    notifier = WebhookNotifier("https://hooks.example/sla", session=FailingSession())

    with pytest.raises(NotificationError):
        notifier.notify_violations(make_agreement(), make_result())


def test_slack_notifier_sends_summary():
    captured = {}

    class DummySession:
        def post(self, url, data, timeout):
            captured["url"] = url
            captured["payload"] = json.loads(data)
            return DummyResponse()

    notifier = SlackNotifier("https://hooks.slack.test/web", channel="#sla", session=DummySession())
    notifier.notify_violations(make_agreement(), make_result())

    assert captured["payload"]["channel"] == "#sla"
    assert "Agreement 01" in captured["payload"]["text"]
    assert "`m >= 0`" in captured["payload"]["text"]


def test_slack_notifier_skips_without_webhook(monkeypatch):
    monkeypatch.delenv("SLACK_WEBHOOK_URL", raising=False)

    class NoNetwork:
        def post(self, *args, **kwargs):
            raise AssertionError("no request expected")

    notifier = SlackNotifier(webhook_url=None, session=NoNetwork())

    assert notifier.send(SlackMessage(text="hello")) == {"status": "skipped"}
    notifier.notify_violations(make_agreement(), make_result())


def test_repository_notifier_stores_violations_with_ids():
    repository = MemoryRepository()
    RepositoryNotifier(repository).notify_violations(make_agreement(), make_result())

    (stored,) = repository.get_violations_by_agreement("a01")
    assert stored.id
    assert stored.values[0].value == -1


def test_safe_notify_swallows_and_reports_failures():
    class Exploding:
        def notify_violations(self, agreement, result):
            raise NotificationError("down")

    assert safe_notify(Exploding(), make_agreement(), make_result()) is False
    assert safe_notify(LogNotifier(), make_agreement(), make_result()) is True


def test_composite_isolates_children():
    received = []

    class Exploding:
        def notify_violations(self, agreement, result):
            raise RuntimeError("down")

    class Recording:
        def notify_violations(self, agreement, result):
            received.append(agreement.id)

    CompositeNotifier([Exploding(), Recording()]).notify_violations(make_agreement(), make_result())

    assert received == ["a01"]
