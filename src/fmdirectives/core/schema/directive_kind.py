#!/usr/bin/env python3
"""
Purpose:
    Defines the DirectiveKind enumeration together with the explicit
    precedence and dependency tables used to build processing plans.
"""

from __future__ import annotations

from typing import Dict, Tuple

from enum import Enum


class DirectiveKind(str, Enum):
    """
    Directive kinds recognised in a schema.

    - frontmatter-part : property is sourced from (a normalisation of) front matter
    - extract-from     : property is populated from a source path expression
    - flatten-arrays   : property receives a deep-flattened array
    - jmespath-filter  : property value is filtered by a JMESPath expression
    - derived-from     : property is aggregated across documents
    """

    FRONTMATTER_PART = "frontmatter-part"
    EXTRACT_FROM = "extract-from"
    FLATTEN_ARRAYS = "flatten-arrays"
    JMESPATH_FILTER = "jmespath-filter"
    DERIVED_FROM = "derived-from"

    # --- Parsing helpers --- #

    @classmethod
    def try_parse(cls, value: str | DirectiveKind | None) -> DirectiveKind | None:
        """
        Coerce `value` to a DirectiveKind; accepts the `x-` prefixed key form.

        Examples
        --------
        >>> DirectiveKind.try_parse("x-flatten-arrays")
        <DirectiveKind.FLATTEN_ARRAYS: 'flatten-arrays'>
        >>> DirectiveKind.try_parse("x-unknown") is None
        True
        """
        if isinstance(value, DirectiveKind):
            return value
        if value is None:
            return None
        s = str(value).strip().lower()
        if s.startswith("x-"):
            s = s[2:]
        try:
            return cls(s)
        except ValueError:
            return None

    # --- Plan helpers --- #

    @property
    def priority(self) -> int:
        """Phase priority; lower runs first."""
        return _PRIORITY[self]

    @property
    def dependencies(self) -> Tuple[DirectiveKind, ...]:
        """Kinds that must complete before this one runs."""
        return _DEPENDENCIES[self]

    @property
    def phase_description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def extension_key(self) -> str:
        return f"x-{self.value}"

    def is_per_document(self) -> bool:
        """True if the kind is applied by per-document processing."""
        return self is not DirectiveKind.DERIVED_FROM

    def is_array_oriented(self) -> bool:
        """True if the kind expects its target property to be an array."""
        return self in {DirectiveKind.EXTRACT_FROM, DirectiveKind.FLATTEN_ARRAYS}


# --- Tables --- #
# Extraction populates a target before it can be flattened, and flattening
# normalises array shape before a filter expression sees the elements.

_PRIORITY: Dict[DirectiveKind, int] = {
    DirectiveKind.FRONTMATTER_PART: 1,
    DirectiveKind.EXTRACT_FROM: 2,
    DirectiveKind.FLATTEN_ARRAYS: 3,
    DirectiveKind.JMESPATH_FILTER: 4,
    DirectiveKind.DERIVED_FROM: 5,
}

_DEPENDENCIES: Dict[DirectiveKind, Tuple[DirectiveKind, ...]] = {
    DirectiveKind.FRONTMATTER_PART: (),
    DirectiveKind.EXTRACT_FROM: (),
    DirectiveKind.FLATTEN_ARRAYS: (DirectiveKind.EXTRACT_FROM,),
    DirectiveKind.JMESPATH_FILTER: (DirectiveKind.FLATTEN_ARRAYS,),
    DirectiveKind.DERIVED_FROM: (DirectiveKind.JMESPATH_FILTER,),
}

_DESCRIPTIONS: Dict[DirectiveKind, str] = {
    DirectiveKind.FRONTMATTER_PART: "Data Structure Foundation",
    DirectiveKind.EXTRACT_FROM: "Data Extraction",
    DirectiveKind.FLATTEN_ARRAYS: "Array Flattening",
    DirectiveKind.JMESPATH_FILTER: "JMESPath Filtering",
    DirectiveKind.DERIVED_FROM: "Field Derivation",
}
