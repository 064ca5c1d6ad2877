from contextlib import contextmanager

from slaguard.assessment.orchestrator import AssessmentSummary
from slaguard.config import get_settings
from slaguard.workers import tasks


def test_beat_schedule_runs_assessment_periodically():
    entry = tasks.celery_app.conf.beat_schedule["assessment-pass"]
    assert entry["task"] == "slaguard.workers.tasks.assess"
    assert entry["schedule"] == get_settings().check_period


def test_assess_runs_pass_under_lock(monkeypatch):
    calls = {}

    @contextmanager
    def fake_lock(key, ttl, wait_timeout, redis_url):
        calls["lock"] = (key, ttl, wait_timeout)
        yield

    repository = object()

    def fake_run(settings, repo):
        calls["repository"] = repo
        return AssessmentSummary(assessed=2, violated=1, failed=0, violations=4)

    monkeypatch.setattr(tasks, "redis_lock", fake_lock)
    monkeypatch.setattr(tasks, "build_repository", lambda settings: repository)
    monkeypatch.setattr(tasks, "run_assessment_pass", fake_run)

    result = tasks.assess()

    assert result == {"status": "completed", "assessed": 2, "violated": 1, "failed": 0, "violations": 4}
    assert calls["repository"] is repository
    assert calls["lock"][0] == tasks.ASSESSMENT_LOCK
    assert calls["lock"][2] == 0


def test_assess_skips_when_previous_pass_holds_lock(monkeypatch):
    @contextmanager
    def busy_lock(key, ttl, wait_timeout, redis_url):
        raise tasks.RedisLockError("busy")
        yield

    def unexpected_run(settings, repo):
        raise AssertionError("pass must not run")

    monkeypatch.setattr(tasks, "redis_lock", busy_lock)
    monkeypatch.setattr(tasks, "build_repository", lambda settings: object())
    monkeypatch.setattr(tasks, "run_assessment_pass", unexpected_run)

    assert tasks.assess() == {"status": "skipped"}
