#!/usr/bin/env python3
"""
Purpose:
    Provides common utility functions: dictionary merge, JSON file loading,
    JSON-value equality and flattening helpers shared by the processors.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from fmdirectives.core.constants import DEFAULT_TEXT_ENCODING


# --- Generic Utilities --- #

def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two dictionaries (values from 'override' take precedence).
    Non-dict values are overwritten; dict values are merged depth-first.
    """
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


def flatten_deep(values: Iterable[Any]) -> List[Any]:
    """Flatten nested lists of any depth, left to right, depth first."""
    out: List[Any] = []
    for v in values:
        if isinstance(v, list):
            out.extend(flatten_deep(v))
        else:
            out.append(v)
    return out


def flatten_once(values: Iterable[Any]) -> List[Any]:
    """Expand list-valued elements by exactly one level."""
    out: List[Any] = []
    for v in values:
        if isinstance(v, list):
            out.extend(v)
        else:
            out.append(v)
    return out


def unique_in_order(values: Iterable[Any]) -> List[Any]:
    """
    Deduplicate by value equality, keeping the first occurrence.

    Works for unhashable JSON values (dicts, lists) by keying on a canonical
    JSON dump. Equal numbers match (`1` and `1.0`), but `True` and `1` are
    kept apart, unlike a plain set.
    """
    seen: set[str] = set()
    out: List[Any] = []
    for v in values:
        key = canonical_json(_integral_floats_as_int(v))
        if key in seen:
            continue
        seen.add(key)
        out.append(v)
    return out


def _integral_floats_as_int(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {k: _integral_floats_as_int(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_integral_floats_as_int(v) for v in value]
    return value


def canonical_json(value: Any) -> str:
    """Stable JSON text for a JSON-like value (sorted keys, no whitespace)."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=repr)


# --- File I/O Helpers --- #

def load_json_file(path: Path) -> Dict[str, Any]:
    """
    Load a JSON file from 'path'. Returns an empty dict if the file is missing.

    Raises:
        ValueError: if the file exists but contains invalid JSON.
    """
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding=DEFAULT_TEXT_ENCODING) as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(
            f"Invalid JSON in {str(path)!r}: {e.msg} (line {e.lineno}, col {e.colno})"
        ) from e
