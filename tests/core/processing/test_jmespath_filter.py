#!/usr/bin/env python3
import pytest

from fmdirectives.core.errors import FilterError
from fmdirectives.core.processing.jmespath_filter import JmesPathEvaluator


@pytest.fixture
def evaluator() -> JmesPathEvaluator:
    return JmesPathEvaluator()


@pytest.mark.parametrize("expression, data, expected", [
    ("[?active].id", [{"id": 1, "active": True}, {"id": 2, "active": False}], [1]),
    ("length(@)", ["a", "b"], 2),
    ("missing", {"a": 1}, None),
    ("sort_by(@, &n)[].n", [{"n": 2}, {"n": 1}], [1, 2]),
])
def test_evaluate(evaluator, expression, data, expected):
    assert evaluator.evaluate(expression, data) == expected


def test_compile_is_cached(evaluator):
    assert evaluator.compile("a.b") is evaluator.compile("a.b")


@pytest.mark.parametrize("expression", ["", "   ", "[?", "foo[", "unknown_fn(@)"])
def test_invalid_expressions_raise_filter_error(evaluator, expression):
    with pytest.raises(FilterError) as ei:
        evaluator.evaluate(expression, {})
    assert ei.value.directive == "x-jmespath-filter"


def test_evaluation_type_errors_raise_filter_error(evaluator):
    with pytest.raises(FilterError, match="evaluation"):
        evaluator.evaluate("length(@)", 5)
