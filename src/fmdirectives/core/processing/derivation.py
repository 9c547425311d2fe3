#!/usr/bin/env python3
"""
Purpose:
    Cross-document derivation: aggregates `x-derived-from` sources over an
    ordered collection of already-processed documents, and assembles the
    aggregate document (frontmatter-part array plus derived fields).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from fmdirectives.core.data.document_data import DocumentData
from fmdirectives.core.path.path_expression import PathExpression, is_valid_path, parse_path
from fmdirectives.core.schema.directive_kind import DirectiveKind
from fmdirectives.core.schema.directives import DerivedFromDirective
from fmdirectives.core.schema.schema import Schema
from fmdirectives.core.processing.structure import StructureClassification, StructureClassifier
from fmdirectives.core.utils import flatten_once, unique_in_order

logger = logging.getLogger(__name__)

DocumentLike = Union[DocumentData, Mapping[str, Any]]


class DerivationProcessor:
    """
    Compute derived fields over many documents.

    Each source path is evaluated unchanged against every document, so
    schema-shaped documents (as returned by `DirectiveProcessor`) work as
    they are. A document that lacks the frontmatter-part path is treated as
    one element of that array: a source written against the aggregate
    (`tools.commands[].c1`) is evaluated on it as its remainder (`c1`).
    Input order is the output order.
    """

    def __init__(self, classifier: Optional[StructureClassifier] = None):
        self._classifier = classifier or StructureClassifier()

    # --- Public API --- #

    def process_derived_fields(
        self,
        documents: Iterable[DocumentLike],
        schema: Schema,
        classification: Optional[StructureClassification] = None,
    ) -> Dict[str, List[Any]]:
        """
        Return `{target path: derived values}` for every derived-from rule of
        `schema`, plus the implied rules of `classification` whose target the
        schema does not declare itself.

        Missing data contributes nothing; an empty document list yields
        empty lists.
        """
        docs = [DocumentData.coerce(d) for d in documents]
        prefix = _frontmatter_prefix(schema)

        out: Dict[str, List[Any]] = {}
        for rule in self._rules(schema, classification):
            out[rule.target] = self.derive(rule, docs, prefix)
            logger.debug("derived %s from %s: %d value(s)", rule.target, rule.source, len(out[rule.target]))
        return out

    def derive(
        self,
        rule: DerivedFromDirective,
        documents: Sequence[DocumentData],
        prefix: Optional[PathExpression] = None,
    ) -> List[Any]:
        """Evaluate one rule against every document, in order."""
        source = rule.source_path
        relative = source.relative_to(prefix) if prefix is not None else None

        values: List[Any] = []
        for doc in documents:
            if relative is not None and not doc.resolve(prefix):
                values.extend(doc.resolve(relative))
            else:
                values.extend(doc.resolve(source))
        if rule.flatten:
            values = flatten_once(values)
        if rule.unique:
            values = unique_in_order(values)
        return values

    def build_aggregate(
        self,
        documents: Iterable[DocumentLike],
        schema: Schema,
        classification: Optional[StructureClassification] = None,
    ) -> DocumentData:
        """
        Assemble the aggregate document: each document becomes one element of
        the frontmatter-part array and every derived field is written at its
        target path.

        Raises:
            NotFoundError: if the schema has no frontmatter-part property.
            ProcessingError: if a target path crosses a non-object value.
        """
        docs = [DocumentData.coerce(d) for d in documents]
        classification = classification or self._classifier.detect_structure_type(schema)

        aggregate = DocumentData().apply(classification.path, lambda _ctx, _cur: [d.to_dict() for d in docs])
        derived = self.process_derived_fields(docs, schema, classification)
        for target, values in derived.items():
            aggregate = aggregate.apply(target, lambda _ctx, _cur, v=values: list(v))
        logger.debug(
            "aggregated %d document(s) into %s (%s)",
            len(docs), classification.path, classification.structure_type.value,
        )
        return aggregate

    # --- Internals --- #

    @staticmethod
    def _rules(
        schema: Schema, classification: Optional[StructureClassification]
    ) -> List[DerivedFromDirective]:
        rules: List[DerivedFromDirective] = list(schema.directives(DirectiveKind.DERIVED_FROM))
        declared = {r.target for r in rules}
        if classification is not None:
            rules.extend(r for r in classification.derived_rules if r.target not in declared)
        return rules


def _frontmatter_prefix(schema: Schema) -> Optional[PathExpression]:
    found = schema.find_frontmatter_part()
    if found is None or not is_valid_path(found[0]):
        return None
    return parse_path(found[0])
