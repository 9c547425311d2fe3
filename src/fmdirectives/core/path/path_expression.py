#!/usr/bin/env python3
"""
Purpose:
    Parses dotted path expressions (`a.b[].c`, `items[0].name`) into an
    immutable sequence of steps that the resolver walks. Parsing is pure
    and cached per distinct expression string.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple, Union

from fmdirectives.core.constants import PATH_SEGMENT_RE
from fmdirectives.core.errors import InvalidPathError


# --- Steps --- #

@dataclass(frozen=True)
class Field:
    """Descend into the map value stored under `name`."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class EachElement:
    """Iterate every element of the array found here."""

    def __str__(self) -> str:
        return "[]"


@dataclass(frozen=True)
class Index:
    """Select one element of the array found here."""
    index: int

    def __str__(self) -> str:
        return f"[{self.index}]"


Step = Union[Field, EachElement, Index]


# --- Expression --- #

@dataclass(frozen=True)
class PathExpression:
    """
    Parsed form of a path expression.

    `raw` keeps the original text for messages; `steps` is the AST. Two
    expressions are equal when their steps are equal.
    """
    raw: str
    steps: Tuple[Step, ...]

    def __str__(self) -> str:
        return self.raw

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathExpression):
            return NotImplemented
        return self.steps == other.steps

    def __hash__(self) -> int:
        return hash(self.steps)

    @property
    def iteration_count(self) -> int:
        """Number of `[]` steps."""
        return sum(1 for s in self.steps if isinstance(s, EachElement))

    @property
    def has_iteration(self) -> bool:
        return self.iteration_count > 0

    @property
    def is_plain(self) -> bool:
        """True when every step is a field lookup (no brackets at all)."""
        return all(isinstance(s, Field) for s in self.steps)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(s.name for s in self.steps if isinstance(s, Field))

    @property
    def head(self) -> str:
        """Name of the first field step."""
        first = self.steps[0]
        return first.name if isinstance(first, Field) else ""

    @property
    def last_field(self) -> str:
        names = self.field_names
        return names[-1] if names else ""

    def relative_to(self, prefix: "PathExpression") -> "PathExpression | None":
        """
        Strip `prefix[]` from the front of this path.

        Returns the remainder (evaluated against one element of the array at
        `prefix`), or None when this path does not start with `prefix[]` or
        nothing would remain.

        Example:
            >>> parse_path("tools.commands[].c1").relative_to(parse_path("tools.commands")).raw
            'c1'
        """
        n = len(prefix.steps)
        if len(self.steps) <= n + 1 or self.steps[:n] != prefix.steps:
            return None
        if not isinstance(self.steps[n], EachElement):
            return None
        rest = self.steps[n + 1:]
        return PathExpression(raw=_render(rest), steps=rest)


# --- Parsing --- #

def parse_path(expression: Union[str, PathExpression]) -> PathExpression:
    """
    Parse a path expression into a `PathExpression`.

    Rules:
    - segments are separated by single dots; empty segments are rejected
    - a segment is a field name (any text without dots, brackets or
      whitespace) optionally followed by `[]` or `[N]`
    - whitespace anywhere is rejected

    Raises:
        InvalidPathError: on any syntax problem.
    """
    if isinstance(expression, PathExpression):
        return expression
    if not isinstance(expression, str):
        raise InvalidPathError(f"Path expression must be a string, got {type(expression).__name__}")
    return _parse_cached(expression)


def is_valid_path(expression: str) -> bool:
    """Return True if the expression parses."""
    try:
        parse_path(expression)
    except InvalidPathError:
        return False
    return True


def _render(steps: Tuple[Step, ...]) -> str:
    out = ""
    for step in steps:
        if isinstance(step, Field):
            out = f"{out}.{step.name}" if out else step.name
        else:
            out += str(step)
    return out


@lru_cache(maxsize=512)
def _parse_cached(expression: str) -> PathExpression:
    if not expression or expression.strip() == "":
        raise InvalidPathError("Path expression cannot be empty", path=expression)
    if any(ch.isspace() for ch in expression):
        raise InvalidPathError(f"Whitespace is not allowed in path {expression!r}", path=expression)
    if expression.startswith(".") or expression.endswith("."):
        raise InvalidPathError(f"Path {expression!r} cannot start or end with a dot", path=expression)

    steps: list[Step] = []
    for position, segment in enumerate(expression.split(".")):
        if segment == "":
            raise InvalidPathError(f"Consecutive dots in path {expression!r}", path=expression)
        m = PATH_SEGMENT_RE.fullmatch(segment)
        if not m:
            raise InvalidPathError(
                f"Invalid segment {segment!r} at position {position} in path {expression!r}",
                path=expression,
            )
        name, index = m.group(1), m.group(2)
        steps.append(Field(name))
        if index is None:
            continue
        steps.append(Index(int(index)) if index else EachElement())

    return PathExpression(raw=expression, steps=tuple(steps))
