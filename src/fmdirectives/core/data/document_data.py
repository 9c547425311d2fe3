#!/usr/bin/env python3
"""
Purpose:
    Immutable, path-addressable snapshot of a document's parsed front matter.
    Every transformation returns a new snapshot; the wrapped tree is never
    mutated and never handed out without copying.
"""

from __future__ import annotations

import copy
import hashlib
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from fmdirectives.core.constants import DEFAULT_TEXT_ENCODING
from fmdirectives.core.errors import InvalidFormatError, InvalidPathError
from fmdirectives.core.path.path_expression import PathExpression, parse_path
from fmdirectives.core.path.resolver import MISSING, resolve, resolve_single, transform
from fmdirectives.core.utils import canonical_json


class DocumentData:
    """
    A front-matter tree (scalars, ordered lists, string-keyed maps).

    Typical use:
        >>> data = DocumentData({"tags": ["a", ["b"]]})
        >>> data.get("tags")
        ['a', ['b']]
        >>> data.with_value("meta.count", 2).get("meta.count")
        2
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise InvalidFormatError(
                f"Document data root must be a mapping, got {type(data).__name__}"
            )
        self._data: Dict[str, Any] = copy.deepcopy(dict(data))

    @classmethod
    def _adopt(cls, data: Dict[str, Any]) -> "DocumentData":
        """Wrap a tree built by this module without copying it again."""
        obj = cls.__new__(cls)
        obj._data = data
        return obj

    @classmethod
    def coerce(cls, value: Union["DocumentData", Mapping[str, Any], None]) -> "DocumentData":
        """Accept either a snapshot or a plain mapping."""
        if isinstance(value, DocumentData):
            return value
        return cls(value)

    # --- Reads --- #

    def to_dict(self) -> Dict[str, Any]:
        """Deep copy of the wrapped tree."""
        return copy.deepcopy(self._data)

    def get(self, path: Union[str, PathExpression], default: Any = MISSING) -> Any:
        """
        Return a copy of the single value at a plain dotted path, or `default`.

        Raises:
            InvalidPathError: if the path is malformed or contains brackets.
        """
        expr = _plain(path)
        value = resolve_single(expr, self._data)
        return default if value is MISSING else copy.deepcopy(value)

    def has(self, path: Union[str, PathExpression]) -> bool:
        return resolve_single(_plain(path), self._data) is not MISSING

    def resolve(self, expression: Union[str, PathExpression]) -> List[Any]:
        """Evaluate a path expression (brackets allowed); values are copies."""
        return copy.deepcopy(resolve(expression, self._data))

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def fingerprint(self) -> str:
        """Stable 16-char hash over the canonical JSON form."""
        raw = canonical_json(self._data).encode(DEFAULT_TEXT_ENCODING)
        return hashlib.sha256(raw).hexdigest()[:16]

    # --- Writes (new snapshots) --- #

    def with_value(self, path: Union[str, PathExpression], value: Any) -> "DocumentData":
        """
        Return a snapshot with `value` stored at a plain dotted path,
        creating intermediate maps as needed.

        Raises:
            InvalidPathError: if the path is malformed or contains brackets.
            ProcessingError: if the path crosses a non-map value.
        """
        owned = copy.deepcopy(value)
        return DocumentData._adopt(transform(self._data, _plain(path), lambda _ctx, _cur: owned))

    def without(self, path: Union[str, PathExpression]) -> "DocumentData":
        """Return a snapshot with the key at `path` removed (no-op when absent)."""
        expr = _plain(path)
        names = expr.field_names
        parent = self._data if len(names) == 1 else resolve_single(".".join(names[:-1]), self._data)
        if not isinstance(parent, dict) or names[-1] not in parent:
            return self
        pruned = {k: v for k, v in parent.items() if k != names[-1]}
        if len(names) == 1:
            return DocumentData._adopt(pruned)
        parent_path = ".".join(names[:-1])
        return DocumentData._adopt(transform(self._data, parent_path, lambda _ctx, _cur: pruned))

    def apply(self, target: Union[str, PathExpression], fn) -> "DocumentData":
        """
        Return a snapshot rewritten by `fn(context, current)` at `target`
        (see `resolver.transform`); `[]` steps apply `fn` per element.
        """
        new = transform(self._data, target, fn)
        return self if new is self._data else DocumentData._adopt(new)

    def raw(self) -> Mapping[str, Any]:
        """Read-only access for processors; callers must not mutate."""
        return self._data

    # --- Dunder --- #

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DocumentData):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data.keys()))

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"<DocumentData keys={list(self._data.keys())}>"


def _plain(path: Union[str, PathExpression]) -> PathExpression:
    expr = parse_path(path)
    if not expr.is_plain:
        raise InvalidPathError(f"Path {expr.raw!r} must not contain array segments here", path=expr.raw)
    return expr
