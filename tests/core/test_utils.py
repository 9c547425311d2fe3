#!/usr/bin/env python3
from pathlib import Path

from fmdirectives.core.utils import (
    canonical_json,
    flatten_deep,
    flatten_once,
    load_json_file,
    merge_dicts,
    unique_in_order,
)


def test_merge_dicts_recursive_override():
    base = {"a": 1, "nested": {"x": 1, "y": 2}}
    override = {"nested": {"y": 3}, "b": 2}
    assert merge_dicts(base, override) == {"a": 1, "b": 2, "nested": {"x": 1, "y": 3}}
    assert base == {"a": 1, "nested": {"x": 1, "y": 2}}


def test_flatten_helpers():
    nested = ["A", ["B", ["C", "D"]], "E", []]
    assert flatten_deep(nested) == ["A", "B", "C", "D", "E"]
    assert flatten_once(nested) == ["A", "B", ["C", "D"], "E"]


def test_unique_in_order_by_value():
    assert unique_in_order(["a", "b", "a", "c"]) == ["a", "b", "c"]
    assert unique_in_order([1, True, 1, None, None]) == [1, True, None]
    assert unique_in_order([[1], [1], {"k": 1}, {"k": 1}]) == [[1], {"k": 1}]


def test_unique_in_order_treats_equal_numbers_as_one():
    assert unique_in_order([1, 1.0, True]) == [1, True]
    assert unique_in_order([2.0, 2, 2.5]) == [2.0, 2.5]
    assert unique_in_order([{"n": 1}, {"n": 1.0}, [3.0], [3]]) == [{"n": 1}, [3.0]]


def test_canonical_json_sorted_and_compact():
    assert canonical_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'


def test_load_json_file_missing_returns_empty(tmp_path: Path):
    assert load_json_file(tmp_path / "nope.json") == {}
