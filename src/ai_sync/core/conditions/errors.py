"""
Exception classes for `when:` condition parsing and evaluation.

Parsers raise these directly. The public evaluation entry points
(:func:`evaluate_condition_expression`, :func:`should_include_rule`) catch
them and report them through their result objects instead.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from ..exceptions import AiSyncError


class ConditionError(AiSyncError, ValueError):
    """Base error for condition expressions.

    Attributes:
        code: Machine-readable error kind (``PARSE_ERROR``, ``UNKNOWN_NAMESPACE``,
            ``INVALID_OPERATOR``, ``MANIFEST_ERROR``)
        expression: The expression fragment that caused the error
        position: Offset in the expression, when known
    """

    code = "PARSE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        expression: str = "",
        position: Optional[int] = None,
        code: Optional[str] = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        if code is not None:
            self.code = code
        ctx = dict(context or {})
        ctx.setdefault("code", self.code)
        ctx.setdefault("expression", expression)
        if position is not None:
            ctx.setdefault("position", position)
        AiSyncError.__init__(self, message, context=ctx)
        ValueError.__init__(self, message)
        self.expression = expression
        self.position = position


class ConditionParseError(ConditionError):
    """Raised for malformed terms, operators, or empty expressions."""

    code = "PARSE_ERROR"


class UnknownNamespaceError(ConditionError):
    """Raised when an identifier prefix is not a supported namespace."""

    code = "UNKNOWN_NAMESPACE"


class ManifestError(ConditionError):
    """Raised when a manifest exists but cannot be read or parsed."""

    code = "MANIFEST_ERROR"

    def __init__(self, message: str, *, path: str = "", expression: str = "") -> None:
        super().__init__(message, expression=expression, context={"path": path})
        self.path = path


__all__ = [
    "ConditionError",
    "ConditionParseError",
    "UnknownNamespaceError",
    "ManifestError",
]
