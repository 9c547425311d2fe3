#!/usr/bin/env python3
import pytest
from pydantic import ValidationError

from fmdirectives.core.errors import ErrorKind, InvalidFormatError, InvalidPathError
from fmdirectives.core.schema.directive_kind import DirectiveKind
from fmdirectives.core.schema.directives import (
    DIRECTIVE_ADAPTER,
    DerivedFromDirective,
    ExtractFromDirective,
    FlattenArraysDirective,
    FrontmatterPartDirective,
    JmesPathFilterDirective,
    collect_extensions,
    parse_directives,
    shape_problems,
)


# --- DirectiveKind --- #

def test_kind_precedence_and_dependencies():
    order = sorted(DirectiveKind, key=lambda k: k.priority)
    assert order == [
        DirectiveKind.FRONTMATTER_PART,
        DirectiveKind.EXTRACT_FROM,
        DirectiveKind.FLATTEN_ARRAYS,
        DirectiveKind.JMESPATH_FILTER,
        DirectiveKind.DERIVED_FROM,
    ]
    assert DirectiveKind.FLATTEN_ARRAYS.dependencies == (DirectiveKind.EXTRACT_FROM,)
    assert DirectiveKind.EXTRACT_FROM.dependencies == ()
    assert DirectiveKind.DERIVED_FROM.phase_description == "Field Derivation"
    assert DirectiveKind.JMESPATH_FILTER.extension_key == "x-jmespath-filter"


@pytest.mark.parametrize("raw, expected", [
    ("x-flatten-arrays", DirectiveKind.FLATTEN_ARRAYS),
    ("derived-from", DirectiveKind.DERIVED_FROM),
    (" X-Extract-From ", DirectiveKind.EXTRACT_FROM),
    (DirectiveKind.JMESPATH_FILTER, DirectiveKind.JMESPATH_FILTER),
    ("x-template", None),
    (None, None),
])
def test_kind_try_parse(raw, expected):
    assert DirectiveKind.try_parse(raw) is expected


def test_per_document_and_array_oriented_flags():
    assert not DirectiveKind.DERIVED_FROM.is_per_document()
    assert DirectiveKind.JMESPATH_FILTER.is_per_document()
    assert DirectiveKind.FLATTEN_ARRAYS.is_array_oriented()
    assert not DirectiveKind.FRONTMATTER_PART.is_array_oriented()


# --- Extension block --- #

def test_collect_extensions_direct_keys_win():
    raw = {
        "type": "array",
        "extensions": {"x-extract-from": "nested", "x-merge-arrays": True, "other": 1},
        "x-extract-from": "direct",
    }
    assert collect_extensions(raw) == {"x-extract-from": "direct", "x-merge-arrays": True}


def test_shape_problems_reports_each_bad_key():
    problems = shape_problems({
        "x-extract-from": 3,
        "x-derived-unique": "yes",
        "x-flatten-arrays": "  ",
        "x-frontmatter-part": True,
        "x-unknown": [],
    })
    assert problems == [
        ("x-extract-from", "string", "number"),
        ("x-flatten-arrays", "string", "empty string"),
        ("x-derived-unique", "boolean", "string"),
    ]


# --- parse_directives --- #

def test_parse_directives_precedence_order_and_params():
    ext = {
        "x-derived-from": "items[].name",
        "x-derived-unique": True,
        "x-jmespath-filter": "[?active]",
        "x-flatten-arrays": "nested",
        "x-extract-from": "sources[]",
        "x-merge-arrays": True,
        "x-frontmatter-part": True,
    }
    out = parse_directives(ext, "things", target_is_array=True)
    assert [d.kind for d in out] == [
        "frontmatter-part", "extract-from", "flatten-arrays", "jmespath-filter", "derived-from",
    ]
    fm, ex, fl, jf, dv = out
    assert isinstance(fm, FrontmatterPartDirective) and fm.source_field is None
    assert isinstance(ex, ExtractFromDirective) and ex.merge_arrays and ex.source_path.has_iteration
    assert isinstance(fl, FlattenArraysDirective) and fl.source == "nested"
    assert isinstance(jf, JmesPathFilterDirective) and jf.expression == "[?active]"
    assert isinstance(dv, DerivedFromDirective) and dv.unique and not dv.flatten
    assert all(d.target == "things" and d.target_is_array for d in out)


def test_parse_directives_explicit_frontmatter_source_and_false_marker():
    (fm,) = parse_directives({"x-frontmatter-part": "tag"}, "tags")
    assert fm.source_field == "tag"
    assert parse_directives({"x-frontmatter-part": False}, "tags") == []


def test_parse_directives_ignores_unknown_and_orphan_modifiers():
    assert parse_directives({"x-template": "t.json", "x-merge-arrays": True}, "p") == []


def test_parse_directives_wrong_shape_raises_invalid_format():
    with pytest.raises(InvalidFormatError, match="'x-derived-unique' must be a boolean") as ei:
        parse_directives({"x-derived-from": "a", "x-derived-unique": "true"}, "p")
    assert ei.value.kind is ErrorKind.INVALID_FORMAT
    assert ei.value.path == "p"
    assert ei.value.directive == "x-derived-unique"


def test_parse_directives_bad_source_path_raises_invalid_path():
    with pytest.raises(InvalidPathError):
        parse_directives({"x-extract-from": "a..b"}, "p")


# --- Models --- #

def test_directives_are_frozen():
    d = ExtractFromDirective(target="t", source="a")
    with pytest.raises(ValidationError):
        d.source = "b"  # type: ignore[misc]


def test_adapter_discriminates_on_kind():
    d = DIRECTIVE_ADAPTER.validate_python({"kind": "flatten-arrays", "target": "t", "source": "a[]"})
    assert isinstance(d, FlattenArraysDirective)
    assert d.directive_kind is DirectiveKind.FLATTEN_ARRAYS
    with pytest.raises(ValidationError):
        DIRECTIVE_ADAPTER.validate_python({"kind": "x-template", "target": "t"})
