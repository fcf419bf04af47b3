from __future__ import annotations

from typing import Any, Dict, Mapping


class AiSyncError(Exception):
    """Base exception for ai-sync."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(AiSyncError):
    """Raised when configuration cannot be loaded or fails validation."""


class DocumentError(AiSyncError):
    """Raised when a document cannot be composed.

    Wraps the include or condition failure that stopped the pipeline so the
    caller can decide whether to skip, warn, or abort the run.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        cause: AiSyncError | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if path is not None:
            ctx.setdefault("path", path)
        if cause is not None:
            ctx.setdefault("cause", cause.to_json_error())
        super().__init__(message, context=ctx)
        self.path = path
        self.cause = cause


__all__ = [
    "AiSyncError",
    "ConfigError",
    "DocumentError",
]
