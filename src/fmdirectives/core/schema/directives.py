#!/usr/bin/env python3
"""
Purpose:
    Defines the immutable Pydantic models for each directive kind, the
    discriminated union over them, and the smart constructor that turns a
    property's extension block into typed directives.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, TypeAdapter

from fmdirectives.core import constants as C
from fmdirectives.core.errors import InvalidFormatError
from fmdirectives.core.path.path_expression import PathExpression, parse_path
from fmdirectives.core.schema.directive_kind import DirectiveKind


# --- Per-kind directive models --- #

class _DirectiveBase(BaseModel):
    """Fields shared by every directive: where its result is written."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    target: StrictStr = Field(..., description="Dotted path of the owning schema property.")
    target_is_array: StrictBool = Field(default=False, description="Owning property is typed 'array'.")

    @property
    def directive_kind(self) -> DirectiveKind:
        return DirectiveKind(self.kind)  # type: ignore[attr-defined]


class FrontmatterPartDirective(_DirectiveBase):
    """Property is sourced from a singular-or-array front-matter field."""
    kind: Literal["frontmatter-part"] = "frontmatter-part"
    source: Union[StrictBool, StrictStr] = Field(
        default=True,
        description="True, or the explicit front-matter field to read.",
    )

    @property
    def source_field(self) -> Optional[str]:
        """Explicit source field name, or None when the marker is `true`."""
        return self.source if isinstance(self.source, str) else None


class ExtractFromDirective(_DirectiveBase):
    """Property is populated from a source path expression."""
    kind: Literal["extract-from"] = "extract-from"
    source: StrictStr = Field(..., description="Path expression to read.")
    merge_arrays: StrictBool = Field(default=False, description="Concatenate array values element-wise.")

    @property
    def source_path(self) -> PathExpression:
        return parse_path(self.source)


class JmesPathFilterDirective(_DirectiveBase):
    """Property value is replaced by a JMESPath evaluation over it."""
    kind: Literal["jmespath-filter"] = "jmespath-filter"
    expression: StrictStr = Field(..., min_length=1, description="JMESPath expression.")


class FlattenArraysDirective(_DirectiveBase):
    """Property receives the deep flattening of the array at `source`."""
    kind: Literal["flatten-arrays"] = "flatten-arrays"
    source: StrictStr = Field(..., description="Path expression of the array to flatten.")

    @property
    def source_path(self) -> PathExpression:
        return parse_path(self.source)


class DerivedFromDirective(_DirectiveBase):
    """Property is aggregated from every document of a collection."""
    kind: Literal["derived-from"] = "derived-from"
    source: StrictStr = Field(..., description="Path expression evaluated per document.")
    unique: StrictBool = Field(default=False, description="Deduplicate, first-seen order.")
    flatten: StrictBool = Field(default=False, description="Expand list values one level.")

    @property
    def source_path(self) -> PathExpression:
        return parse_path(self.source)


# --- Discriminated union of all directives --- #

Directive = Annotated[
    Union[
        FrontmatterPartDirective,
        ExtractFromDirective,
        JmesPathFilterDirective,
        FlattenArraysDirective,
        DerivedFromDirective,
    ],
    Field(discriminator="kind"),
]

DIRECTIVE_ADAPTER: TypeAdapter = TypeAdapter(Directive)


# --- Extension block --- #

def collect_extensions(raw_property: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Gather the `x-*` keys of a raw schema property.

    Keys may sit inside an `extensions` sub-object or directly on the
    property; direct keys win.
    """
    gathered: Dict[str, Any] = {}
    nested = raw_property.get(C.EXTENSIONS_KEY)
    if isinstance(nested, Mapping):
        gathered.update({k: v for k, v in nested.items() if isinstance(k, str) and k.startswith("x-")})
    gathered.update({k: v for k, v in raw_property.items() if isinstance(k, str) and k.startswith("x-")})
    return gathered


# --- Shape checks --- #
# Expected value shape per extension key; the validator reports these as
# errors, the smart constructor raises on the first one.

_EXPECTED: Mapping[str, Tuple[Tuple[type, ...], str]] = {
    C.X_FRONTMATTER_PART: ((bool, str), "boolean or string"),
    C.X_EXTRACT_FROM: ((str,), "string"),
    C.X_MERGE_ARRAYS: ((bool,), "boolean"),
    C.X_JMESPATH_FILTER: ((str,), "string"),
    C.X_FLATTEN_ARRAYS: ((str,), "string"),
    C.X_DERIVED_FROM: ((str,), "string"),
    C.X_DERIVED_UNIQUE: ((bool,), "boolean"),
    C.X_DERIVED_FLATTEN: ((bool,), "boolean"),
}


def shape_problems(extensions: Mapping[str, Any]) -> List[Tuple[str, str, str]]:
    """
    Return `(key, expected, actual)` for every recognised key holding a
    value of the wrong shape, in the order of the table above.
    Empty strings count as wrong shape for string-valued keys.
    """
    problems: List[Tuple[str, str, str]] = []
    for key, (types, expected) in _EXPECTED.items():
        if key not in extensions:
            continue
        value = extensions[key]
        ok = isinstance(value, types)
        if ok and isinstance(value, str) and value.strip() == "":
            ok = False
        if not ok:
            problems.append((key, expected, _json_type_name(value)))
    return problems


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "empty string" if value.strip() == "" else "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


# --- Smart constructor --- #

def parse_directives(extensions: Mapping[str, Any], target: str, *, target_is_array: bool = False) -> List[Directive]:
    """
    Parse one property's extension block into typed directives.

    Order of the returned list follows the kind precedence
    (frontmatter-part, extract-from, flatten-arrays, jmespath-filter,
    derived-from). Modifier keys without their owning directive produce
    nothing. Unrecognised keys are ignored.

    Raises:
        InvalidFormatError: if a recognised key holds the wrong value shape.
        InvalidPathError: if a source path expression cannot be parsed.
    """
    problems = shape_problems(extensions)
    if problems:
        key, expected, actual = problems[0]
        raise InvalidFormatError(
            f"{target}: {key!r} must be a {expected}, got {actual}",
            path=target,
            directive=key,
        )

    common = {"target": target, "target_is_array": target_is_array}
    out: List[Directive] = []

    fm = extensions.get(C.X_FRONTMATTER_PART)
    if fm is not None and fm is not False:
        out.append(FrontmatterPartDirective(source=fm, **common))

    if C.X_EXTRACT_FROM in extensions:
        source = extensions[C.X_EXTRACT_FROM]
        parse_path(source)
        out.append(ExtractFromDirective(
            source=source,
            merge_arrays=extensions.get(C.X_MERGE_ARRAYS, False),
            **common,
        ))

    if C.X_FLATTEN_ARRAYS in extensions:
        source = extensions[C.X_FLATTEN_ARRAYS]
        parse_path(source)
        out.append(FlattenArraysDirective(source=source, **common))

    if C.X_JMESPATH_FILTER in extensions:
        out.append(JmesPathFilterDirective(expression=extensions[C.X_JMESPATH_FILTER], **common))

    if C.X_DERIVED_FROM in extensions:
        source = extensions[C.X_DERIVED_FROM]
        parse_path(source)
        out.append(DerivedFromDirective(
            source=source,
            unique=extensions.get(C.X_DERIVED_UNIQUE, False),
            flatten=extensions.get(C.X_DERIVED_FLATTEN, False),
            **common,
        ))

    return out
