#!/usr/bin/env python3
"""
Core constants used across fmdirectives.

- Directive keys: the recognised `x-*` schema extension keys.
- Registry shape: array names and the implied derived field of registry schemas.
- File handling: supported schema extensions and default text encoding.
- Regular expressions: compiled patterns used by the path parser.
"""

import re
from typing import Final

# --- Directive extension keys --- #

X_FRONTMATTER_PART: Final[str] = "x-frontmatter-part"
X_EXTRACT_FROM: Final[str] = "x-extract-from"
X_MERGE_ARRAYS: Final[str] = "x-merge-arrays"
X_JMESPATH_FILTER: Final[str] = "x-jmespath-filter"
X_FLATTEN_ARRAYS: Final[str] = "x-flatten-arrays"
X_DERIVED_FROM: Final[str] = "x-derived-from"
X_DERIVED_UNIQUE: Final[str] = "x-derived-unique"
X_DERIVED_FLATTEN: Final[str] = "x-derived-flatten"

# Keys recognised by the directive parser; anything else is ignored
DIRECTIVE_KEYS: Final[frozenset[str]] = frozenset({
    X_FRONTMATTER_PART,
    X_EXTRACT_FROM,
    X_MERGE_ARRAYS,
    X_JMESPATH_FILTER,
    X_FLATTEN_ARRAYS,
    X_DERIVED_FROM,
    X_DERIVED_UNIQUE,
    X_DERIVED_FLATTEN,
})

# Sub-object some schemas use to hold the extension keys
EXTENSIONS_KEY: Final[str] = "extensions"


# --- Registry classification --- #

# Array property names that mark `<object>.<name>` as a registry
DEFAULT_REGISTRY_ARRAY_NAMES: Final[tuple[str, ...]] = ("commands", "entries")

# Implied derived field synthesised for registry schemas
REGISTRY_DERIVED_FIELD: Final[str] = "availableConfigs"

# Item field used for the implied rule when the item schema names no scalar field
REGISTRY_FALLBACK_SOURCE_FIELD: Final[str] = "c1"


# --- File handling --- #

# Supported schema file extensions
SUPPORTED_SCHEMA_EXT: Final[frozenset[str]] = frozenset({".json"})

# Default text encoding
DEFAULT_TEXT_ENCODING: Final[str] = "utf-8"


# --- Regular Expressions --- #

# Field name inside a path: any non-empty text without dots, brackets or whitespace
FIELD_NAME_PATTERN: Final[str] = r"[^.\[\]\s]+"

# One path segment: a field name, optionally followed by `[]` or `[N]`
PATH_SEGMENT_RE: re.Pattern[str] = re.compile(rf"^({FIELD_NAME_PATTERN})(?:\[([0-9]*)\])?$")

# Schema property names usable as a target path segment
PROPERTY_NAME_RE: re.Pattern[str] = re.compile(rf"^{FIELD_NAME_PATTERN}$")
