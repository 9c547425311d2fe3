#!/usr/bin/env python3
"""
Purpose:
    Thin adapter over the `jmespath` library. Expressions are compiled once
    per distinct string; library exceptions are translated into FilterError.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

import jmespath
from jmespath.exceptions import JMESPathError
from jmespath.parser import ParsedResult

from fmdirectives.core.errors import FilterError

logger = logging.getLogger(__name__)


class JmesPathEvaluator:
    """
    Evaluate JMESPath expressions against JSON-like values.

    Example:
        >>> JmesPathEvaluator().evaluate("[?active].id", [{"id": 1, "active": True}])
        [1]
    """

    def compile(self, expression: str) -> ParsedResult:
        """
        Compile `expression`.

        Raises:
            FilterError: on empty or syntactically invalid expressions.
        """
        if not isinstance(expression, str) or expression.strip() == "":
            raise FilterError("JMESPath expression cannot be empty", directive="x-jmespath-filter")
        try:
            return _compile_cached(expression)
        except JMESPathError as e:
            raise FilterError(
                f"Invalid JMESPath expression {expression!r}: {e}",
                directive="x-jmespath-filter",
            ) from e

    def evaluate(self, expression: str, data: Any) -> Any:
        """
        Evaluate `expression` against `data`; `None` means no match.

        Raises:
            FilterError: if the expression does not compile or evaluation fails.
        """
        compiled = self.compile(expression)
        try:
            result = compiled.search(data)
        except JMESPathError as e:
            raise FilterError(
                f"JMESPath evaluation of {expression!r} failed: {e}",
                directive="x-jmespath-filter",
            ) from e
        logger.debug("jmespath %r -> %s", expression, type(result).__name__)
        return result


@lru_cache(maxsize=256)
def _compile_cached(expression: str) -> ParsedResult:
    return jmespath.compile(expression)
