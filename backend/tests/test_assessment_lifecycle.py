from datetime import UTC, datetime, timedelta
from itertools import product

import pytest

from slaguard.assessment.expression import EvaluationError, ParseError
from slaguard.assessment.lifecycle import (
    InvalidTransitionError,
    assess_agreement,
    is_valid_transition,
    terminate_if_expired,
    transition,
)
from slaguard.assessment.monitor.array import ArrayMonitoringAdapter
from slaguard.models import Agreement, Details, Guarantee, MetricValue, Party, State

T0 = datetime(2024, 1, 1, tzinfo=UTC)


def make_agreement(state=State.STOPPED, expiration=None, constraint="m >= 0"):
    details = Details(
        id="a01",
        name="Agreement 01",
        provider=Party(id="p01", name="Provider 01"),
        client=Party(id="c01", name="Client 01"),
        creation=T0,
        expiration=expiration,
        guarantees=[Guarantee(name="gt", constraint=constraint)],
    )
    return Agreement(id="a01", name="Agreement 01", details=details, state=state)


def values_adapter(*values):
    return ArrayMonitoringAdapter(
        [
            {"m": MetricValue(key="m", value=v, timestamp=T0 + timedelta(seconds=i))}
            for i, v in enumerate(values)
        ]
    )


@pytest.mark.parametrize("current,new", list(product(State, State)))
def test_transition_table(current, new):
    assert is_valid_transition(current, new) is (current != State.TERMINATED)


def test_transition_returns_record_and_changes_state():
    agreement = make_agreement(State.STOPPED)

    record = transition(agreement, State.STARTED, metadata={"source": "test"})

    assert agreement.state == State.STARTED
    assert record.agreement_id == "a01"
    assert record.from_state == State.STOPPED
    assert record.to_state == State.STARTED
    assert record.to_dict()["metadata"] == {"source": "test"}


def test_transition_out_of_terminated_is_rejected():
    agreement = make_agreement(State.TERMINATED)

    with pytest.raises(InvalidTransitionError):
        transition(agreement, State.TERMINATED)
    assert agreement.state == State.TERMINATED


@pytest.mark.parametrize("state", list(State))
def test_expired_agreements_are_terminated_without_evaluation(state):
    now = T0 + timedelta(days=2)
    agreement = make_agreement(state, expiration=T0 + timedelta(days=1))

    result = assess_agreement(agreement, values_adapter(-1), now)

    assert result == {}
    assert agreement.state == State.TERMINATED
    assert agreement.assessment.first_execution is None
    assert agreement.assessment.last_execution is None


def test_terminate_if_expired_ignores_future_and_missing_expiration():
    now = T0 + timedelta(days=2)
    assert terminate_if_expired(make_agreement(State.STARTED), now) is False
    future = make_agreement(State.STARTED, expiration=now + timedelta(seconds=1))
    assert terminate_if_expired(future, now) is False
    assert future.state == State.STARTED


def test_stopped_agreement_is_not_evaluated():
    agreement = make_agreement(State.STOPPED)

    assert assess_agreement(agreement, values_adapter(-1), T0) == {}
    assert agreement.assessment.first_execution is None
    assert agreement.assessment.last_execution is None


def test_assessment_timestamps_on_consecutive_passes():
    agreement = make_agreement(State.STOPPED)
    transition(agreement, State.STARTED)
    t0 = T0 + timedelta(hours=1)
    t1 = t0 + timedelta(minutes=1)

    assess_agreement(agreement, values_adapter(1), t0)
    assert agreement.assessment.first_execution == t0
    assert agreement.assessment.last_execution == t0

    assess_agreement(agreement, values_adapter(1), t1)
    assert agreement.assessment.first_execution == t0
    assert agreement.assessment.last_execution == t1


def test_started_agreement_reports_violations():
    agreement = make_agreement(State.STARTED)

    result = assess_agreement(agreement, values_adapter(1, -1), T0)

    assert len(result["gt"].violations) == 1


def test_evaluation_error_still_advances_timestamps():
    agreement = make_agreement(State.STARTED, constraint="missing > 0")

    with pytest.raises(EvaluationError):
        assess_agreement(agreement, values_adapter(1), T0)
    assert agreement.assessment.first_execution == T0
    assert agreement.assessment.last_execution == T0


def test_parse_error_advances_last_execution_only():
    agreement = make_agreement(State.STARTED, constraint="m >= ")
    agreement.assessment.first_execution = T0
    later = T0 + timedelta(minutes=1)

    with pytest.raises(ParseError):
        assess_agreement(agreement, values_adapter(1), later)
    assert agreement.assessment.first_execution == T0
    assert agreement.assessment.last_execution == later
