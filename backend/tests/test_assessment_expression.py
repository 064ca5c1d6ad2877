import pytest

from slaguard.assessment.expression import (
    EvaluationError,
    Expression,
    ExpressionError,
    ParseError,
    evaluate,
    tokenize,
)


@pytest.mark.parametrize(
    "text,params,expected",
    [
        ("m >= 0", {"m": 1}, True),
        ("m >= 0", {"m": -1}, False),
        ("latency < 0.5 && availability > 0.99", {"latency": 0.3, "availability": 0.995}, True),
        ("latency < 0.5 && availability > 0.99", {"latency": 0.7, "availability": 0.995}, False),
        ("a > 10 || b > 10", {"a": 1, "b": 11}, True),
        ("!(a == b)", {"a": 1, "b": 2}, True),
        ("(a + b) * 2 >= 10", {"a": 2, "b": 3}, True),
        ("a % 2 == 1", {"a": 7}, True),
        ("-a < 0", {"a": 3}, True),
        ("a / 4 == 0.5", {"a": 2}, True),
        ("status == 'up'", {"status": "up"}, True),
        ('name != "svc"', {"name": "other"}, True),
        ("region < 'b'", {"region": "a"}, True),
        ("healthy", {"healthy": True}, True),
        ("healthy == false", {"healthy": True}, False),
        ("[response time] <= 200", {"response time": 150}, True),
        ("cpu.usage < 90", {"cpu.usage": 45.5}, True),
        ("1.5e2 == 150", {}, True),
    ],
)
def test_evaluate_supported_forms(text, params, expected):
    assert evaluate(text, params) is expected


def test_precedence_of_logical_operators():
    # && binds tighter than ||
    assert evaluate("a || b && c", {"a": True, "b": False, "c": False}) is True
    assert evaluate("(a || b) && c", {"a": True, "b": False, "c": False}) is False


def test_variables_in_first_appearance_order():
    expression = Expression.parse("b > 1 && a < 2 || b == [c d]")
    assert expression.variables() == ["b", "a", "c d"]


def test_parse_is_memoised():
    assert Expression.parse("x > 1") is Expression.parse("x > 1")


@pytest.mark.parametrize(
    "text",
    ["", "   ", "a >", "(a > 1", "a > 1)", "a b", "a # 1", "&& a", "a > > 1"],
)
def test_parse_errors(text):
    with pytest.raises(ParseError):
        Expression.parse(text)


def test_missing_variable_is_an_error_even_when_short_circuited():
    with pytest.raises(EvaluationError) as exc:
        evaluate("a > 0 || b > 0", {"a": 1})
    assert "'b'" in str(exc.value)


@pytest.mark.parametrize(
    "text,params",
    [
        ("a + 1", {"a": 1}),  # not boolean
        ("a > 'x'", {"a": 1}),
        ("a && true", {"a": 1}),
        ("!a", {"a": 1}),
        ("-a > 0", {"a": "text"}),
        ("a * 2 > 1", {"a": "text"}),
        ("a / 0 > 1", {"a": 1}),
    ],
)
def test_evaluation_errors(text, params):
    with pytest.raises(EvaluationError):
        evaluate(text, params)


def test_errors_share_a_base_class():
    assert issubclass(ParseError, ExpressionError)
    assert issubclass(EvaluationError, ExpressionError)


def test_tokenize_unescapes_strings_and_reads_numbers():
    tokens = tokenize(r"name == 'it\'s' && n == 42")
    values = [t.value for t in tokens]
    assert "it's" in values
    assert 42 in values
    assert isinstance(tokens[-1].value, int)
