#!/usr/bin/env python3
"""
Purpose:
    Evaluates parsed path expressions against JSON-like trees.

    - `resolve` returns the ordered, flattened list of values reachable by
      iterating every `[]` step and descending field steps into maps.
    - `transform` rebuilds a tree with the value at a target path replaced,
      copying only the nodes along the way; the input is never mutated.
"""

from __future__ import annotations

from typing import Any, Callable, List, Mapping, Sequence, Union

from fmdirectives.core.errors import ProcessingError
from fmdirectives.core.path.path_expression import (
    EachElement,
    Field,
    Index,
    PathExpression,
    Step,
    parse_path,
)


class _Missing:
    """Sentinel for 'no value here' (distinct from an explicit null)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

# fn(context, current) -> new value, or MISSING to leave the target untouched
TransformFn = Callable[[Any, Any], Any]


# --- Queries --- #

def resolve(expression: Union[str, PathExpression], root: Any) -> List[Any]:
    """
    Return every value reachable from `root` by `expression`, in order.

    Missing or non-matching intermediates contribute nothing for their
    branch; explicit `None` leaves are kept; missing leaves are dropped.
    A path without `[]` yields at most one value.

    Raises:
        InvalidPathError: if the expression cannot be parsed.
    """
    path = parse_path(expression)
    out: List[Any] = []
    _collect(root, path.steps, 0, out)
    return out


def resolve_single(expression: Union[str, PathExpression], root: Any) -> Any:
    """Return the first resolved value, or MISSING."""
    values = resolve(expression, root)
    return values[0] if values else MISSING


def _collect(node: Any, steps: Sequence[Step], i: int, out: List[Any]) -> None:
    if i == len(steps):
        out.append(node)
        return

    step = steps[i]
    if isinstance(step, Field):
        if isinstance(node, Mapping) and step.name in node:
            _collect(node[step.name], steps, i + 1, out)
        return

    if not isinstance(node, list):
        return

    if isinstance(step, EachElement):
        for element in node:
            _collect(element, steps, i + 1, out)
        return

    if isinstance(step, Index) and step.index < len(node):
        _collect(node[step.index], steps, i + 1, out)


# --- Rewrites --- #

def transform(root: Mapping[str, Any], target: Union[str, PathExpression], fn: TransformFn) -> Any:
    """
    Return a copy of `root` where the value at `target` is replaced by
    `fn(context, current)`.

    `context` is the innermost array element the target passes through
    (the root itself when the target has no `[]` step); `current` is the
    existing value or MISSING. Returning MISSING leaves the tree unchanged
    at that spot. Missing intermediate maps are created on plain-field
    paths; `null` intermediates are treated as missing.

    Raises:
        InvalidPathError: if `target` cannot be parsed.
        ProcessingError: if the target crosses a scalar or uses an index step.
    """
    path = parse_path(target)
    if any(isinstance(s, Index) for s in path.steps):
        raise ProcessingError(f"Target path {path.raw!r} cannot use an indexed segment", path=path.raw)
    return _rewrite(root, path.steps, 0, root, fn, path.raw)


def _rewrite(node: Any, steps: Sequence[Step], i: int, context: Any, fn: TransformFn, raw: str) -> Any:
    step = steps[i]
    last = i == len(steps) - 1

    if isinstance(step, EachElement):
        if not isinstance(node, list):
            return node
        changed = False
        out = []
        for element in node:
            if last:
                new = fn(element, element)
                new = element if new is MISSING else new
            elif isinstance(element, dict):
                new = _rewrite(element, steps, i + 1, element, fn, raw)
            else:
                new = element
            changed = changed or new is not element
            out.append(new)
        return out if changed else node

    if not isinstance(node, dict):
        raise ProcessingError(
            f"Target path {raw!r} crosses a non-object value at {step.name!r}",
            path=raw,
        )

    current = node.get(step.name, MISSING)
    if last:
        new = fn(context, current)
        if new is MISSING:
            return node
        return {**node, step.name: new}

    if current is MISSING or current is None:
        if not all(isinstance(s, Field) for s in steps[i + 1:]):
            return node
        current = {}

    new_child = _rewrite(current, steps, i + 1, context, fn, raw)
    if new_child is current:
        return node
    return {**node, step.name: new_child}
