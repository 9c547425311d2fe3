#!/usr/bin/env python3
"""
Purpose:
    Per-document directive processing.

    - `resolve_processing_order` builds a dependency-ordered, phased plan
      over the directive kinds a schema declares (Kahn's algorithm).
    - `process_directives` runs the plan against one document snapshot and
      returns a new snapshot; the input is never modified.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Union

from fmdirectives.core.data.document_data import DocumentData
from fmdirectives.core.errors import InvalidPathError, ProcessingError
from fmdirectives.core.path.path_expression import parse_path
from fmdirectives.core.path.resolver import MISSING, resolve
from fmdirectives.core.processing.jmespath_filter import JmesPathEvaluator
from fmdirectives.core.processing.plan import DirectiveNode, DirectivePhase, ProcessingPlan
from fmdirectives.core.schema.directive_kind import DirectiveKind
from fmdirectives.core.schema.directives import (
    Directive,
    ExtractFromDirective,
    FlattenArraysDirective,
    FrontmatterPartDirective,
    JmesPathFilterDirective,
)
from fmdirectives.core.schema.schema import Schema
from fmdirectives.core.utils import flatten_deep, flatten_once

logger = logging.getLogger(__name__)


class DirectiveProcessor:
    """
    Apply a schema's per-document directives to front-matter data.

    Example:
        >>> proc = DirectiveProcessor()
        >>> plan = proc.resolve_processing_order(schema)
        >>> out = proc.process_directives({"tags": ["a", ["b"]]}, schema, plan)
    """

    def __init__(self, evaluator: Optional[JmesPathEvaluator] = None):
        self._evaluator = evaluator or JmesPathEvaluator()
        self._handlers: Dict[DirectiveKind, Callable[[Directive], Callable[[Any, Any], Any]]] = {
            DirectiveKind.FRONTMATTER_PART: self._frontmatter_part,
            DirectiveKind.EXTRACT_FROM: self._extract_from,
            DirectiveKind.FLATTEN_ARRAYS: self._flatten_arrays,
            DirectiveKind.JMESPATH_FILTER: self._jmespath_filter,
        }

    # --- Planning --- #

    def resolve_processing_order(self, schema: Schema) -> ProcessingPlan:
        """
        Build the processing plan for `schema`.

        One node per declared directive kind; direct dependencies that the
        schema does not declare are added as placeholders (`is_present=False`)
        so the graph is complete.

        Raises:
            ProcessingError: if the dependency graph has a cycle.
        """
        paths: Dict[DirectiveKind, List[str]] = {}
        for d in schema.directives():
            paths.setdefault(DirectiveKind(d.kind), []).append(d.target)

        nodes: Dict[DirectiveKind, DirectiveNode] = {
            kind: DirectiveNode(id=kind.value, kind=kind, schema_paths=tuple(p))
            for kind, p in sorted(paths.items(), key=lambda kv: kv[0].priority)
        }
        for kind in list(nodes):
            for dep in kind.dependencies:
                if dep not in nodes:
                    nodes[dep] = DirectiveNode(id=dep.value, kind=dep, is_present=False)

        ordered = _topological_sort(nodes)
        phases = _group_into_phases(ordered)
        plan = ProcessingPlan(
            phases=tuple(phases),
            total_directives=len(paths),
            dependency_graph={
                n.id: tuple(dep.value for dep in n.kind.dependencies if dep in nodes)
                for n in ordered
            },
        )
        logger.debug("resolved %r", plan)
        return plan

    # --- Execution --- #

    def process_directives(
        self,
        data: Union[DocumentData, Mapping[str, Any]],
        schema: Schema,
        plan: Optional[ProcessingPlan] = None,
    ) -> DocumentData:
        """
        Run every present per-document directive, phase by phase; within a
        phase directives run in schema declaration order against the
        evolving snapshot. `derived-from` nodes are left to the derivation
        processor.

        Raises:
            FilterError: if a JMESPath expression fails.
            ProcessingError: if a target path crosses a non-object value.
        """
        current = DocumentData.coerce(data)
        plan = plan or self.resolve_processing_order(schema)

        for phase in plan.phases:
            logger.debug("phase %d: %s", phase.phase_number, phase.description)
            for node in phase.directives:
                if not node.is_present:
                    continue
                if not node.kind.is_per_document():
                    logger.debug("skipping %s (cross-document)", node.id)
                    continue
                for directive in schema.directives(node.kind):
                    current = self.apply_directive(current, directive)
        return current

    def apply_directive(self, data: DocumentData, directive: Directive) -> DocumentData:
        """Apply one per-document directive and return the new snapshot."""
        handler = self._handlers.get(directive.directive_kind)
        if handler is None:
            raise ProcessingError(
                f"{directive.kind} cannot be applied to a single document",
                path=directive.target,
                directive=directive.kind,
            )
        try:
            target = parse_path(directive.target)
        except InvalidPathError as e:
            raise ProcessingError(
                f"Invalid target path {directive.target!r}: {e.message}",
                path=directive.target,
                directive=directive.kind,
            ) from e

        out = data.apply(target, handler(directive))
        if out is data:
            logger.debug("%s at %s: no change", directive.kind, directive.target)
        return out

    # --- Handlers --- #
    # Each returns fn(context, current): `context` is the root, or the array
    # element for targets under `items`; returning MISSING leaves the target as is.

    def _frontmatter_part(self, d: FrontmatterPartDirective):
        field = d.source_field

        def fn(context: Any, current: Any) -> Any:
            if field is None:
                if current is MISSING or isinstance(current, list):
                    return MISSING
                return [] if current is None else [current]

            expr = parse_path(field)
            values = resolve(expr, context)
            if not values:
                return MISSING
            if expr.has_iteration:
                return values
            value = values[0]
            if value is None:
                return []
            return value if isinstance(value, list) else [value]

        return fn

    def _extract_from(self, d: ExtractFromDirective):
        expr = d.source_path

        def fn(context: Any, current: Any) -> Any:
            values = resolve(expr, context)
            if not values:
                return [] if d.target_is_array else MISSING
            if d.merge_arrays:
                return flatten_once(values)
            if not expr.has_iteration:
                value = values[0]
                if d.target_is_array and not isinstance(value, list):
                    return [value]
                return value
            return values

        return fn

    def _flatten_arrays(self, d: FlattenArraysDirective):
        expr = d.source_path

        def fn(context: Any, current: Any) -> Any:
            values = resolve(expr, context)
            if not values:
                return MISSING
            if not expr.has_iteration:
                if not isinstance(values[0], list):
                    return MISSING
                values = values[0]
            return flatten_deep(values)

        return fn

    def _jmespath_filter(self, d: JmesPathFilterDirective):
        def fn(context: Any, current: Any) -> Any:
            if current is MISSING:
                return MISSING
            result = self._evaluator.evaluate(d.expression, current)
            if result is None and d.target_is_array:
                return []
            return result

        return fn


# --- Plan internals --- #

def _topological_sort(nodes: Dict[DirectiveKind, DirectiveNode]) -> List[DirectiveNode]:
    """Kahn's algorithm; ties resolve by priority so output is stable."""
    in_degree: Dict[DirectiveKind, int] = {k: 0 for k in nodes}
    dependents: Dict[DirectiveKind, List[DirectiveKind]] = {k: [] for k in nodes}
    for kind in nodes:
        for dep in kind.dependencies:
            if dep in nodes:
                dependents[dep].append(kind)
                in_degree[kind] += 1

    queue: Deque[DirectiveKind] = deque(sorted((k for k, d in in_degree.items() if d == 0), key=lambda k: k.priority))
    ordered: List[DirectiveNode] = []
    while queue:
        kind = queue.popleft()
        ordered.append(nodes[kind])
        for nxt in sorted(dependents[kind], key=lambda k: k.priority):
            in_degree[nxt] -= 1
            if in_degree[nxt] == 0:
                queue.append(nxt)

    if len(ordered) != len(nodes):
        cycle = [k.value for k in nodes if nodes[k] not in ordered]
        raise ProcessingError(f"Circular directive dependency: {' -> '.join(cycle)}")
    return ordered


def _group_into_phases(ordered: List[DirectiveNode]) -> List[DirectivePhase]:
    groups: Dict[int, List[DirectiveNode]] = {}
    for node in ordered:
        groups.setdefault(node.kind.priority, []).append(node)
    return [
        DirectivePhase(
            phase_number=i,
            description=groups[priority][0].kind.phase_description,
            directives=tuple(groups[priority]),
        )
        for i, priority in enumerate(sorted(groups), start=1)
    ]
