from datetime import UTC, datetime, timedelta

import pytest

from slaguard.assessment.evaluator import (
    evaluate_agreement,
    evaluate_guarantee,
    evaluate_gt_violations,
)
from slaguard.assessment.expression import EvaluationError, ParseError
from slaguard.assessment.model import has_violations
from slaguard.assessment.monitor.array import ArrayMonitoringAdapter
from slaguard.models import Agreement, Details, Guarantee, MetricValue, Party, State

T0 = datetime(2024, 1, 1, tzinfo=UTC)


def make_agreement(*guarantees):
    details = Details(
        id="a01",
        name="Agreement 01",
        provider=Party(id="p01", name="Provider 01"),
        client=Party(id="c01", name="Client 01"),
        creation=T0,
        guarantees=list(guarantees),
    )
    return Agreement(id="a01", name="Agreement 01", details=details, state=State.STARTED)


def snapshot(offset, **values):
    return {
        key: MetricValue(key=key, value=value, timestamp=T0 + timedelta(seconds=offset))
        for key, value in values.items()
    }


def test_guarantee_with_one_negative_value_fails_once():
    guarantee = Guarantee(name="gt", constraint="m >= 0")
    agreement = make_agreement(guarantee)
    adapter = ArrayMonitoringAdapter([snapshot(1, m=1), snapshot(2, m=-1)]).initialize(agreement)

    failed = evaluate_guarantee(agreement, guarantee, adapter)

    assert len(failed) == 1
    assert failed[0]["m"].value == -1

    violations = evaluate_gt_violations(agreement, guarantee, failed)
    assert len(violations) == 1
    assert violations[0].agreement_id == "a01"
    assert violations[0].guarantee == "gt"
    assert violations[0].constraint == "m >= 0"


def test_violation_timestamp_is_newest_snapshot_value():
    guarantee = Guarantee(name="gt", constraint="a + b < 10")
    agreement = make_agreement(guarantee)
    failed = [
        {
            "a": MetricValue(key="a", value=5, timestamp=T0 + timedelta(seconds=3)),
            "b": MetricValue(key="b", value=7, timestamp=T0 + timedelta(seconds=9)),
        }
    ]

    (violation,) = evaluate_gt_violations(agreement, guarantee, failed)

    assert violation.timestamp == T0 + timedelta(seconds=9)
    assert violation.timestamp == max(v.timestamp for v in violation.values)
    assert {v.key for v in violation.values} == {"a", "b"}


def test_agreement_result_only_holds_failed_guarantees():
    agreement = make_agreement(
        Guarantee(name="latency", constraint="latency < 100"),
        Guarantee(name="errors", constraint="errors == 0"),
    )
    adapter = ArrayMonitoringAdapter(
        {
            "latency": [snapshot(1, latency=50), snapshot(2, latency=150), snapshot(3, latency=250)],
            "errors": [snapshot(1, errors=0)],
        }
    )

    result = evaluate_agreement(agreement, adapter)

    assert list(result) == ["latency"]
    assert len(result["latency"].metrics) == 2
    assert len(result["latency"].violations) == 2
    assert has_violations(result)


def test_missing_variable_is_an_error():
    agreement = make_agreement(Guarantee(name="gt", constraint="m >= 0 && n >= 0"))
    adapter = ArrayMonitoringAdapter([snapshot(1, m=1)])

    with pytest.raises(EvaluationError):
        evaluate_agreement(agreement, adapter)


def test_first_failing_guarantee_aborts_agreement():
    agreement = make_agreement(
        Guarantee(name="broken", constraint="m >="),
        Guarantee(name="fine", constraint="m < 0"),
    )
    adapter = ArrayMonitoringAdapter([snapshot(1, m=1)])

    with pytest.raises(ParseError):
        evaluate_agreement(agreement, adapter)


def test_adapter_is_initialized_once_per_agreement():
    calls = []

    class CountingAdapter(ArrayMonitoringAdapter):
        def initialize(self, agreement):
            calls.append(agreement.id)
            return super().initialize(agreement)

    agreement = make_agreement(
        Guarantee(name="g1", constraint="m > 0"),
        Guarantee(name="g2", constraint="m > 1"),
    )
    evaluate_agreement(agreement, CountingAdapter([snapshot(1, m=1)]))

    assert calls == ["a01"]
