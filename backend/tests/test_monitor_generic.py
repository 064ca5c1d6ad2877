import random
from datetime import UTC, datetime, timedelta

import pytest

from slaguard.assessment.evaluator import evaluate_guarantee
from slaguard.assessment.expression import EvaluationError
from slaguard.assessment.monitor.generic import (
    GenericAdapter,
    aggregate,
    get_from_for_variable,
    identity,
)
from slaguard.assessment.monitor.retrievers import RandomRetriever
from slaguard.models import (
    Aggregation,
    Agreement,
    Details,
    Guarantee,
    MetricValue,
    Party,
    State,
    Variable,
)

CREATION = datetime(2024, 1, 1, tzinfo=UTC)
NOW = CREATION + timedelta(minutes=10)


def make_agreement(variables=(), last_execution=None):
    details = Details(
        id="a01",
        name="Agreement 01",
        provider=Party(id="p01", name="Provider 01"),
        client=Party(id="c01", name="Client 01"),
        creation=CREATION,
        guarantees=[Guarantee(name="gt", constraint="cpu < 90 && mem < 90")],
        variables=list(variables),
    )
    agreement = Agreement(id="a01", name="Agreement 01", details=details, state=State.STARTED)
    agreement.assessment.last_execution = last_execution
    return agreement


def readings(key, *points):
    return [MetricValue(key=key, value=v, timestamp=CREATION + timedelta(seconds=t)) for t, v in points]


def test_aggregate_averages_and_keeps_last_timestamp():
    variable = Variable(name="cpu", aggregation=Aggregation(type="average", window=60))
    values = readings("cpu", (0, 10), (30, 20), (60, 60))

    (result,) = aggregate(variable, values)

    assert result.key == "cpu"
    assert result.value == pytest.approx(30)
    assert result.timestamp == values[-1].timestamp


def test_aggregate_passes_through_plain_and_empty_series():
    values = readings("cpu", (0, 10), (30, 20))
    assert aggregate(Variable(name="cpu"), values) == values
    assert aggregate(Variable(name="cpu", aggregation=Aggregation(type="median", window=60)), values) == values
    assert aggregate(Variable(name="cpu", aggregation=Aggregation(window=60)), []) == []


def test_identity_returns_values_untouched():
    values = readings("cpu", (0, 1))
    assert identity(Variable(name="cpu"), values) is values


def test_from_for_windowed_variable():
    windowed = Variable(name="cpu", aggregation=Aggregation(window=300))
    assert get_from_for_variable(windowed, CREATION, NOW) == NOW - timedelta(seconds=300)
    assert get_from_for_variable(Variable(name="cpu"), CREATION, NOW) == CREATION


def test_adapter_queries_from_creation_then_last_execution():
    windows = []

    def retrieve(agreement, variables, from_time, to_time):
        windows.append((from_time, to_time, [v.name for v in variables]))
        return {v: readings(v.name, (1, 1)) for v in variables}

    adapter = GenericAdapter(retrieve=retrieve, clock=lambda: NOW)
    guarantee = Guarantee(name="gt", constraint="cpu < 90 && mem < 90")

    adapter.initialize(make_agreement()).get_values(guarantee, ["cpu", "mem"])
    last = NOW - timedelta(minutes=1)
    adapter.initialize(make_agreement(last_execution=last)).get_values(guarantee, ["cpu"])

    assert windows == [(CREATION, NOW, ["cpu", "mem"]), (last, NOW, ["cpu"])]


def test_adapter_resolves_declared_variables_and_processes_each_series():
    seen = {}

    def retrieve(agreement, variables, from_time, to_time):
        for variable in variables:
            seen[variable.name] = variable
        return {
            variables[0]: readings("cpu", (1, 40), (2, 80)),
            variables[1]: readings("mem", (1, 70), (2, 50)),
        }

    declared = Variable(name="cpu", metric="node_cpu", aggregation=Aggregation(window=60))
    adapter = GenericAdapter(retrieve=retrieve, process=aggregate, clock=lambda: NOW)
    bound = adapter.initialize(make_agreement([declared]))

    snapshots = bound.get_values(Guarantee(name="gt", constraint="cpu < 90"), ["cpu", "mem"])

    assert seen["cpu"].metric == "node_cpu"
    assert seen["mem"].metric == "mem"
    # The averaged cpu reading is stamped at t=2, so the mem reading at t=1 has no partner
    assert [(s["cpu"].value, s["mem"].value) for s in snapshots] == [(60, 50)]


def test_initialize_returns_bound_copy():
    adapter = GenericAdapter(retrieve=RandomRetriever(size=2))
    bound = adapter.initialize(make_agreement())
    assert bound is not adapter
    assert adapter.agreement is None
    assert bound.agreement.id == "a01"


def test_get_values_requires_initialize():
    adapter = GenericAdapter(retrieve=RandomRetriever(size=2))
    with pytest.raises(RuntimeError):
        adapter.get_values(Guarantee(name="gt", constraint="cpu < 1"), ["cpu"])


def test_random_retriever_end_to_end():
    adapter = GenericAdapter(retrieve=RandomRetriever(size=3, rng=random.Random(7)), clock=lambda: NOW)
    bound = adapter.initialize(make_agreement())

    snapshots = bound.get_values(Guarantee(name="gt", constraint="cpu < 1 && mem < 1"), ["cpu", "mem"])

    # Both series share evenly spaced instants, so every instant yields a snapshot
    assert len(snapshots) == 3
    assert all(set(s) == {"cpu", "mem"} for s in snapshots)


def test_variable_omitted_by_retriever_is_an_evaluation_error():
    def retrieve(agreement, variables, from_time, to_time):
        cpu = next(v for v in variables if v.name == "cpu")
        return {cpu: readings("cpu", (1, 40), (2, 50))}

    guarantee = Guarantee(name="gt", constraint="cpu < 90 && mem < 90")
    bound = GenericAdapter(retrieve=retrieve, clock=lambda: NOW).initialize(make_agreement())

    snapshots = bound.get_values(guarantee, ["cpu", "mem"])
    assert [set(s) for s in snapshots] == [{"cpu"}, {"cpu"}]

    with pytest.raises(EvaluationError):
        evaluate_guarantee(bound.agreement, guarantee, bound)


def test_variable_returned_empty_discards_every_snapshot():
    def retrieve(agreement, variables, from_time, to_time):
        return {
            v: readings("cpu", (1, 40)) if v.name == "cpu" else []
            for v in variables
        }

    guarantee = Guarantee(name="gt", constraint="cpu < 90 && mem < 90")
    bound = GenericAdapter(retrieve=retrieve, clock=lambda: NOW).initialize(make_agreement())

    assert bound.get_values(guarantee, ["cpu", "mem"]) == []
    assert evaluate_guarantee(bound.agreement, guarantee, bound) == []
