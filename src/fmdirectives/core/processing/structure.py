#!/usr/bin/env python3
"""
Purpose:
    Classifies where a schema keeps its frontmatter-part array (registry,
    collection or custom) and derives the processing hints callers use to
    pick an aggregation policy.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from fmdirectives.core import constants as C
from fmdirectives.core.errors import NotFoundError
from fmdirectives.core.path.path_expression import is_valid_path, parse_path
from fmdirectives.core.schema.directives import DerivedFromDirective
from fmdirectives.core.schema.schema import Schema, SchemaProperty


class StructureType(str, Enum):
    REGISTRY = "registry"
    COLLECTION = "collection"
    CUSTOM = "custom"


class StructureClassification(BaseModel):
    """
    Result of classifying a schema.

    - path: dotted path of the frontmatter-part array
    - derived_rules: implied derived fields (registry only)
    """
    model_config = ConfigDict(frozen=True)

    structure_type: StructureType
    path: str
    description: str
    derived_rules: Tuple[DerivedFromDirective, ...] = Field(default_factory=tuple)

    @property
    def last_segment(self) -> str:
        return self.path.rsplit(".", 1)[-1]


class ProcessingHints(BaseModel):
    model_config = ConfigDict(frozen=True)

    requires_aggregation: bool
    expected_array_fields: Tuple[str, ...]
    derivation_rules: Tuple[str, ...]
    template_format: Literal["json", "auto"]


class StructureClassifier:
    """
    Pure schema -> classification / hints functions, parameterised by the
    array names that mark a registry (`<object>.commands`, `<object>.entries`).
    """

    def __init__(
        self,
        registry_array_names: Optional[Iterable[str]] = None,
        derived_field: str = C.REGISTRY_DERIVED_FIELD,
        fallback_source_field: str = C.REGISTRY_FALLBACK_SOURCE_FIELD,
    ):
        names = C.DEFAULT_REGISTRY_ARRAY_NAMES if registry_array_names is None else registry_array_names
        self.registry_array_names: Tuple[str, ...] = tuple(names)
        self.derived_field = derived_field
        self.fallback_source_field = fallback_source_field

    def detect_structure_type(self, schema: Schema) -> StructureClassification:
        """
        Classify `schema` by its first frontmatter-part property
        (depth-first, declaration order).

        Raises:
            NotFoundError: if no property carries `x-frontmatter-part`.
        """
        found = schema.find_frontmatter_part()
        if found is None:
            raise NotFoundError(f"No {C.X_FRONTMATTER_PART} property found in schema")
        path, prop = found

        plain = is_valid_path(path) and parse_path(path).is_plain
        segments = path.split(".")
        if plain and len(segments) == 2 and segments[1] in self.registry_array_names:
            parent, name = segments
            return StructureClassification(
                structure_type=StructureType.REGISTRY,
                path=path,
                description=f"Registry structure with {name!r} array under {parent!r}",
                derived_rules=(self._implied_rule(parent, path, prop),),
            )
        if plain and len(segments) == 1:
            return StructureClassification(
                structure_type=StructureType.COLLECTION,
                path=path,
                description=f"Collection structure with top-level {path!r} array",
            )
        return StructureClassification(
            structure_type=StructureType.CUSTOM,
            path=path,
            description=f"Custom structure with frontmatter-part array at {path!r}",
        )

    def get_processing_hints(self, classification: StructureClassification) -> ProcessingHints:
        if classification.structure_type is StructureType.REGISTRY:
            return ProcessingHints(
                requires_aggregation=True,
                expected_array_fields=self.registry_array_names,
                derivation_rules=(self.derived_field,),
                template_format="json",
            )
        if classification.structure_type is StructureType.COLLECTION:
            fields: Tuple[str, ...] = (classification.path,)
        else:
            fields = (classification.last_segment,)
        return ProcessingHints(
            requires_aggregation=False,
            expected_array_fields=fields,
            derivation_rules=(),
            template_format="auto",
        )

    # --- Internals --- #

    def _implied_rule(self, parent: str, path: str, prop: SchemaProperty) -> DerivedFromDirective:
        item_field = prop.items.first_scalar_field() if prop.items is not None else None
        return DerivedFromDirective(
            target=f"{parent}.{self.derived_field}",
            target_is_array=True,
            source=f"{path}[].{item_field or self.fallback_source_field}",
            unique=True,
        )
