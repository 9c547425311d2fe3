#!/usr/bin/env python3

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class IssueKind(str, Enum):
    TYPE_MISMATCH = "TypeMismatch"
    INVALID_PATH = "InvalidPath"
    INVALID_VALUE = "InvalidDirectiveValue"
    MISSING_DIRECTIVE = "MissingRequiredDirective"
    ORPHAN_MODIFIER = "OrphanModifier"
    CIRCULAR_REFERENCE = "CircularReference"


@dataclass(frozen=True)
class ValidationIssue:
    """
    One finding of the directive validator.
    - kind: issue category
    - path: schema location the issue refers to (e.g. 'tags.type')
    - message: human-readable description
    - directive: the `x-*` key involved, if any
    """
    kind: IssueKind
    path: str
    message: str
    directive: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ValidationReport:
    def __init__(self):
        self.errors: List[ValidationIssue] = []
        self.warnings: List[ValidationIssue] = []

    def error(self, kind: IssueKind, path: str, message: str, directive: Optional[str] = None) -> None:
        self.errors.append(ValidationIssue(kind, path, message, directive))

    def warn(self, kind: IssueKind, path: str, message: str, directive: Optional[str] = None) -> None:
        self.warnings.append(ValidationIssue(kind, path, message, directive))

    def extend(self, other: "ValidationReport") -> "ValidationReport":
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    @property
    def is_valid(self) -> bool:
        """Warnings never affect validity."""
        return not self.errors

    def __len__(self):
        return len(self.errors)

    def __iter__(self):
        return iter(self.errors)

    def __repr__(self):
        return f"<ValidationReport valid={self.is_valid} errors={len(self.errors)} warnings={len(self.warnings)}>"
