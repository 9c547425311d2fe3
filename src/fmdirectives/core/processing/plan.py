#!/usr/bin/env python3
"""
Purpose:
    Immutable processing-plan models: dependency-ordered directive nodes
    grouped into numbered phases. A plan is derived once per schema and
    reused for every document.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from fmdirectives.core.schema.directive_kind import DirectiveKind


class DirectiveNode(BaseModel):
    """
    One directive kind in the plan.

    - id: the kind's value (e.g. 'flatten-arrays')
    - schema_paths: target paths carrying this kind, in declaration order
    - is_present: False for placeholder nodes added to satisfy a dependency
    """
    model_config = ConfigDict(frozen=True)

    id: str
    kind: DirectiveKind
    schema_paths: Tuple[str, ...] = Field(default_factory=tuple)
    is_present: bool = True


class DirectivePhase(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase_number: int = Field(..., ge=1)
    description: str
    directives: Tuple[DirectiveNode, ...] = Field(default_factory=tuple)


class ProcessingPlan(BaseModel):
    """
    Ordered phases plus the dependency graph they were derived from.

    `dependency_graph` maps every node id to the ids it depends on.
    """
    model_config = ConfigDict(frozen=True)

    phases: Tuple[DirectivePhase, ...] = Field(default_factory=tuple)
    total_directives: int = 0
    dependency_graph: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)

    def nodes(self) -> List[DirectiveNode]:
        """All nodes in execution order."""
        return [n for phase in self.phases for n in phase.directives]

    def node(self, kind: DirectiveKind) -> Optional[DirectiveNode]:
        for n in self.nodes():
            if n.kind is kind:
                return n
        return None

    def present_kinds(self) -> List[DirectiveKind]:
        """Kinds actually declared in the schema, in execution order."""
        return [n.kind for n in self.nodes() if n.is_present]

    def __repr__(self) -> str:
        order = " -> ".join(n.id for n in self.nodes())
        return f"<ProcessingPlan phases={len(self.phases)} directives={self.total_directives} order={order}>"
