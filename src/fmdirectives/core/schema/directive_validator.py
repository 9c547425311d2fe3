#!/usr/bin/env python3
"""
Purpose:
    Quality checks over the raw `x-*` directive blocks of a schema. Problems
    are collected into a ValidationReport (errors make it invalid, warnings
    never do) rather than raised.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from fmdirectives.core import constants as C
from fmdirectives.core.errors import FilterError, InvalidPathError
from fmdirectives.core.path.path_expression import parse_path
from fmdirectives.core.processing.jmespath_filter import JmesPathEvaluator
from fmdirectives.core.schema.directives import collect_extensions, shape_problems
from fmdirectives.core.validation import IssueKind, ValidationReport

logger = logging.getLogger(__name__)

# Directive keys whose value is a path expression
_PATH_KEYS = (C.X_EXTRACT_FROM, C.X_FLATTEN_ARRAYS, C.X_DERIVED_FROM)

# Modifier -> directive it belongs to
_MODIFIERS: Dict[str, str] = {
    C.X_MERGE_ARRAYS: C.X_EXTRACT_FROM,
    C.X_DERIVED_UNIQUE: C.X_DERIVED_FROM,
    C.X_DERIVED_FLATTEN: C.X_DERIVED_FROM,
}


class DirectiveValidator:
    """
    Validate directive usage on raw (dict) schema properties.

    Errors:
        - wrong value shape for a recognised key
        - unparsable path expression / JMESPath expression
        - `x-derived-from` whose source starts at the property itself
        - property names that cannot be addressed by a dotted path
    Warnings:
        - `x-extract-from` / `x-flatten-arrays` on a non-array property
        - `x-flatten-arrays` without `x-frontmatter-part`
        - `x-frontmatter-part` on a non-array property
        - modifier keys without their owning directive
    """

    def __init__(self, evaluator: Optional[JmesPathEvaluator] = None):
        self._evaluator = evaluator or JmesPathEvaluator()

    # --- Public API --- #

    def validate_property(self, raw_property: Mapping[str, Any], path: str) -> ValidationReport:
        """Validate the directive block of one property located at `path`."""
        report = ValidationReport()
        if not isinstance(raw_property, Mapping):
            return report

        ext = collect_extensions(raw_property)
        if not ext:
            return report

        bad_shape = set()
        for key, expected, actual in shape_problems(ext):
            bad_shape.add(key)
            report.error(
                IssueKind.INVALID_VALUE,
                f"{path}.{key}",
                f"{key} must be a {expected}, got {actual}",
                directive=key,
            )

        self._check_paths(ext, path, bad_shape, report)
        self._check_filter(ext, path, bad_shape, report)
        self._check_circular(ext, path, bad_shape, report)
        self._check_array_usage(raw_property, ext, path, report)
        self._check_orphans(ext, path, report)
        return report

    def validate_schema(self, schema: Mapping[str, Any]) -> ValidationReport:
        """
        Walk every property (`properties` and `items`, depth-first, in
        declaration order) and merge the per-property reports.
        """
        report = ValidationReport()
        if isinstance(schema, Mapping):
            self._walk(schema, "", report)
        logger.debug("validated schema: %r", report)
        return report

    # --- Walk --- #

    def _walk(self, node: Mapping[str, Any], path: str, report: ValidationReport) -> None:
        props = node.get("properties")
        if isinstance(props, Mapping):
            for name, child in props.items():
                child_path = f"{path}.{name}" if path else str(name)
                if not isinstance(name, str) or not C.PROPERTY_NAME_RE.fullmatch(name):
                    report.error(
                        IssueKind.INVALID_PATH,
                        child_path,
                        f"Property name {name!r} cannot be used as a path segment",
                    )
                    continue
                if not isinstance(child, Mapping):
                    continue
                report.extend(self.validate_property(child, child_path))
                self._walk(child, child_path, report)

        items = node.get("items")
        if path and isinstance(items, Mapping):
            item_path = f"{path}[]"
            report.extend(self.validate_property(items, item_path))
            self._walk(items, item_path, report)

    # --- Checks --- #

    @staticmethod
    def _check_paths(ext: Mapping[str, Any], path: str, skip: set, report: ValidationReport) -> None:
        for key in _PATH_KEYS:
            if key not in ext or key in skip:
                continue
            try:
                parse_path(ext[key])
            except InvalidPathError as e:
                report.error(IssueKind.INVALID_PATH, f"{path}.{key}", e.message, directive=key)

    def _check_filter(self, ext: Mapping[str, Any], path: str, skip: set, report: ValidationReport) -> None:
        key = C.X_JMESPATH_FILTER
        if key not in ext or key in skip:
            return
        try:
            self._evaluator.compile(ext[key])
        except FilterError as e:
            report.error(IssueKind.INVALID_VALUE, f"{path}.{key}", e.message, directive=key)

    @staticmethod
    def _check_circular(ext: Mapping[str, Any], path: str, skip: set, report: ValidationReport) -> None:
        key = C.X_DERIVED_FROM
        if key not in ext or key in skip:
            return
        try:
            source = parse_path(ext[key]).field_names
            target = parse_path(path).field_names
        except InvalidPathError:
            return
        if target and source[:len(target)] == target:
            report.error(
                IssueKind.CIRCULAR_REFERENCE,
                path,
                f"{key} source {ext[key]!r} refers back to {path!r}",
                directive=key,
            )

    @staticmethod
    def _check_array_usage(
        raw_property: Mapping[str, Any], ext: Mapping[str, Any], path: str, report: ValidationReport
    ) -> None:
        declared = raw_property.get("type")
        is_array = declared == "array" or (isinstance(declared, list) and "array" in declared)

        for key in (C.X_EXTRACT_FROM, C.X_FLATTEN_ARRAYS):
            if key in ext and declared is not None and not is_array:
                report.warn(
                    IssueKind.TYPE_MISMATCH,
                    f"{path}.type",
                    f"{key} expects an array property, found type {declared!r}",
                    directive=key,
                )

        fm = ext.get(C.X_FRONTMATTER_PART)
        has_fm = fm is not None and fm is not False
        if C.X_FLATTEN_ARRAYS in ext and not has_fm:
            report.warn(
                IssueKind.MISSING_DIRECTIVE,
                path,
                f"{C.X_FLATTEN_ARRAYS} specified without {C.X_FRONTMATTER_PART}",
                directive=C.X_FRONTMATTER_PART,
            )
        if has_fm and not is_array:
            report.warn(
                IssueKind.TYPE_MISMATCH,
                f"{path}.type",
                f"{C.X_FRONTMATTER_PART} expects an array property, found type {declared or 'unknown'!r}",
                directive=C.X_FRONTMATTER_PART,
            )

    @staticmethod
    def _check_orphans(ext: Mapping[str, Any], path: str, report: ValidationReport) -> None:
        for modifier, owner in _MODIFIERS.items():
            if modifier in ext and owner not in ext:
                report.warn(
                    IssueKind.ORPHAN_MODIFIER,
                    f"{path}.{modifier}",
                    f"{modifier} has no effect without {owner}",
                    directive=modifier,
                )
