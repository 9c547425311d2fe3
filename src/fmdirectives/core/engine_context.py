#!/usr/bin/env python3
"""
Purpose:
    Wires together the fmdirectives engine context: merged configuration,
    logging, and the processors configured from it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from fmdirectives.core.config import load_config
from fmdirectives.core.constants import REGISTRY_DERIVED_FIELD, REGISTRY_FALLBACK_SOURCE_FIELD
from fmdirectives.core.logging_setup import configure_logging
from fmdirectives.core.processing.derivation import DerivationProcessor
from fmdirectives.core.processing.directive_processor import DirectiveProcessor
from fmdirectives.core.processing.jmespath_filter import JmesPathEvaluator
from fmdirectives.core.processing.structure import StructureClassifier
from fmdirectives.core.schema.directive_validator import DirectiveValidator
from fmdirectives.core.schema.schema import Schema
from fmdirectives.core.validation import ValidationReport

logger = logging.getLogger(__name__)


# --- Data model --- #

@dataclass(frozen=True)
class EngineContext:
    """Immutable container for configuration and engine services."""
    config: Dict[str, Any]
    processor: DirectiveProcessor
    derivation: DerivationProcessor
    classifier: StructureClassifier
    validator: DirectiveValidator

    def load_schema(self, schema: Mapping[str, Any]) -> Schema:
        """
        Validate a raw schema, log its warnings, and build the Schema.

        Raises:
            InvalidFormatError / InvalidPathError: as `Schema.from_dict`.
        """
        self.validate_schema(schema)
        return Schema.from_dict(dict(schema))

    def validate_schema(self, schema: Mapping[str, Any]) -> ValidationReport:
        """Run the directive validator and surface its findings in the log."""
        report = self.validator.validate_schema(schema)
        for issue in report.warnings:
            logger.warning("%s [%s]", issue, issue.kind.value)
        for issue in report.errors:
            logger.error("%s [%s]", issue, issue.kind.value)
        return report


# --- Factory --- #

def build_context(config: Optional[Dict[str, Any]] = None) -> EngineContext:
    """
    Build an `EngineContext`.

    Args:
        config:
            Pre-merged configuration. If omitted, `load_config()` is used.

    Returns:
        EngineContext: immutable bundle of config and engine services.
    """
    cfg = config or load_config()
    configure_logging(cfg)

    evaluator = JmesPathEvaluator()
    classifier = StructureClassifier(
        registry_array_names=cfg.get("registry_array_names"),
        derived_field=cfg.get("registry_derived_field", REGISTRY_DERIVED_FIELD),
        fallback_source_field=cfg.get("registry_fallback_source_field", REGISTRY_FALLBACK_SOURCE_FIELD),
    )
    return EngineContext(
        config=cfg,
        processor=DirectiveProcessor(evaluator),
        derivation=DerivationProcessor(classifier),
        classifier=classifier,
        validator=DirectiveValidator(evaluator),
    )
