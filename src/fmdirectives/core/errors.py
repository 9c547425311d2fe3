#!/usr/bin/env python3
"""
Purpose:
    Defines the closed set of engine failure kinds and the exception
    hierarchy that carries them across the engine boundary.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """
    Discriminant carried by every engine failure.

    - InvalidFormat   : a directive parameter holds the wrong value shape
    - InvalidPath     : a path expression cannot be parsed
    - NotFound        : no frontmatter-part marker exists in the schema
    - FilterError     : the JMESPath evaluator rejected an expression
    - ProcessingError : directive execution must abort the document
    """

    INVALID_FORMAT = "InvalidFormat"
    INVALID_PATH = "InvalidPath"
    NOT_FOUND = "NotFound"
    FILTER_ERROR = "FilterError"
    PROCESSING_ERROR = "ProcessingError"


class EngineError(Exception):
    """Base class for all failures raised by the engine."""

    kind: ErrorKind = ErrorKind.PROCESSING_ERROR

    def __init__(self, message: str, *, path: Optional[str] = None, directive: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.directive = directive

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind.value} message={self.message!r}>"


class InvalidFormatError(EngineError, ValueError):
    kind = ErrorKind.INVALID_FORMAT


class InvalidPathError(EngineError, ValueError):
    kind = ErrorKind.INVALID_PATH


class NotFoundError(EngineError, LookupError):
    kind = ErrorKind.NOT_FOUND


class FilterError(EngineError):
    kind = ErrorKind.FILTER_ERROR


class ProcessingError(EngineError):
    kind = ErrorKind.PROCESSING_ERROR
