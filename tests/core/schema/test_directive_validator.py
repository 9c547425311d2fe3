#!/usr/bin/env python3
import pytest

from fmdirectives.core.processing.directive_processor import DirectiveProcessor
from fmdirectives.core.schema.directive_validator import DirectiveValidator
from fmdirectives.core.schema.schema import Schema
from fmdirectives.core.validation import IssueKind


@pytest.fixture
def validator() -> DirectiveValidator:
    return DirectiveValidator()


# --- validate_property: warnings --- #

def test_flatten_on_string_property_is_valid_with_two_warnings(validator):
    report = validator.validate_property({"type": "string", "x-flatten-arrays": "tags"}, "title")
    assert report.is_valid
    assert report.errors == []
    assert [w.kind for w in report.warnings] == [IssueKind.TYPE_MISMATCH, IssueKind.MISSING_DIRECTIVE]
    assert report.warnings[0].path == "title.type"
    assert report.warnings[1].directive == "x-frontmatter-part"


def test_flatten_with_frontmatter_part_on_array_is_clean(validator):
    report = validator.validate_property(
        {"type": "array", "x-frontmatter-part": True, "x-flatten-arrays": "tags"}, "tags"
    )
    assert report.is_valid
    assert report.warnings == []


def test_extract_from_on_non_array_warns(validator):
    report = validator.validate_property({"type": "object", "x-extract-from": "meta"}, "m")
    assert report.is_valid
    assert [w.kind for w in report.warnings] == [IssueKind.TYPE_MISMATCH]


def test_untyped_property_does_not_warn_for_extract(validator):
    report = validator.validate_property({"x-extract-from": "meta"}, "m")
    assert report.warnings == []


def test_frontmatter_part_on_non_array_warns(validator):
    report = validator.validate_property({"type": "string", "x-frontmatter-part": True}, "tag")
    assert report.is_valid
    assert len(report.warnings) == 1
    assert "unknown" not in report.warnings[0].message


@pytest.mark.parametrize("modifier", ["x-merge-arrays", "x-derived-unique", "x-derived-flatten"])
def test_orphan_modifiers_warn(validator, modifier):
    report = validator.validate_property({"type": "array", modifier: True}, "p")
    assert report.is_valid
    assert [w.kind for w in report.warnings] == [IssueKind.ORPHAN_MODIFIER]
    assert report.warnings[0].directive == modifier


# --- validate_property: errors --- #

def test_wrong_shapes_are_errors(validator):
    report = validator.validate_property(
        {"type": "array", "x-extract-from": 1, "x-merge-arrays": "yes", "x-frontmatter-part": ""},
        "p",
    )
    assert not report.is_valid
    assert [e.directive for e in report.errors] == ["x-frontmatter-part", "x-extract-from", "x-merge-arrays"]
    assert all(e.kind is IssueKind.INVALID_VALUE for e in report.errors)
    assert len(report) == 3


def test_unparsable_path_is_error(validator):
    report = validator.validate_property({"type": "array", "x-extract-from": "a[x]"}, "p")
    assert [e.kind for e in report.errors] == [IssueKind.INVALID_PATH]
    assert report.errors[0].path == "p.x-extract-from"


def test_bad_jmespath_is_error(validator):
    report = validator.validate_property({"type": "array", "x-jmespath-filter": "[?"}, "p")
    assert not report.is_valid
    assert report.errors[0].directive == "x-jmespath-filter"


def test_circular_derived_from_is_error(validator):
    report = validator.validate_property({"type": "array", "x-derived-from": "stats.all[].id"}, "stats.all")
    assert [e.kind for e in report.errors] == [IssueKind.CIRCULAR_REFERENCE]


def test_derived_from_sibling_is_not_circular(validator):
    report = validator.validate_property(
        {"type": "array", "x-derived-from": "tools.commands[].c1"}, "tools.availableConfigs"
    )
    assert report.is_valid


def test_no_extensions_is_empty_report(validator):
    report = validator.validate_property({"type": "string"}, "p")
    assert report.is_valid and not report.warnings
    assert "valid=True" in repr(report)


# --- validate_schema --- #

def test_validate_schema_walks_properties_and_items(validator):
    schema = {
        "type": "object",
        "properties": {
            "books": {
                "type": "array",
                "x-frontmatter-part": True,
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string", "x-flatten-arrays": "x"},
                        "bad.name": {"type": "string"},
                    },
                },
            },
            "count": {"type": "number", "x-derived-unique": True},
        },
    }
    report = validator.validate_schema(schema)
    assert [e.path for e in report.errors] == ["books[].bad.name"]
    assert [(w.path, w.kind) for w in report.warnings] == [
        ("books[].title.type", IssueKind.TYPE_MISMATCH),
        ("books[].title", IssueKind.MISSING_DIRECTIVE),
        ("count.x-derived-unique", IssueKind.ORPHAN_MODIFIER),
    ]


def test_validate_schema_tolerates_non_mapping_nodes(validator):
    report = validator.validate_schema({"properties": {"a": True, "b": {"items": False}}})
    assert report.is_valid
    assert validator.validate_schema([]).is_valid  # type: ignore[arg-type]


def test_schema_accepted_by_validator_processes_cleanly(validator):
    raw = {"properties": {
        "タグ": {"type": "array", "x-extract-from": "src[]"},
        "2024": {"type": "array", "x-extract-from": "og:tags"},
    }}
    assert validator.validate_schema(raw).is_valid

    proc = DirectiveProcessor()
    out = proc.process_directives({"src": ["a"], "og:tags": ["b"]}, Schema.from_dict(raw))
    assert out.to_dict()["タグ"] == ["a"]
    assert out.to_dict()["2024"] == ["b"]


@pytest.mark.parametrize("name", ["a.b", "a[]", "has space"])
def test_property_names_that_cannot_be_segments_are_errors(validator, name):
    report = validator.validate_schema({"properties": {name: {"type": "string"}}})
    assert [e.kind for e in report.errors] == [IssueKind.INVALID_PATH]
