"""Include resolution error classes."""
from __future__ import annotations

from typing import List, Optional, Sequence

from ..exceptions import AiSyncError


class IncludeError(AiSyncError):
    """Base error for `@include` resolution.

    Attributes:
        code: ``CIRCULAR_INCLUDE``, ``FILE_NOT_FOUND``, ``MAX_DEPTH_EXCEEDED`` or ``READ_ERROR``
        include_path: The include target (resolved path where known)
        source_file: The file containing the offending directive
        chain: Include chain from the first occurrence through the repeat
        max_depth: The depth limit, for depth errors
    """

    code = "INCLUDE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        include_path: str,
        source_file: str,
        chain: Optional[Sequence[str]] = None,
        max_depth: Optional[int] = None,
    ) -> None:
        context = {
            "code": self.code,
            "include_path": include_path,
            "source_file": source_file,
        }
        if chain is not None:
            context["chain"] = list(chain)
        if max_depth is not None:
            context["max_depth"] = max_depth
        super().__init__(message, context=context)
        self.include_path = include_path
        self.source_file = source_file
        self.chain: Optional[List[str]] = list(chain) if chain is not None else None
        self.max_depth = max_depth


class CircularIncludeError(IncludeError):
    """Raised when an include re-enters a file already being expanded."""

    code = "CIRCULAR_INCLUDE"


class IncludeNotFoundError(IncludeError):
    """Raised when an include target does not exist."""

    code = "FILE_NOT_FOUND"


class MaxIncludeDepthError(IncludeError):
    """Raised when nested includes go deeper than the configured limit."""

    code = "MAX_DEPTH_EXCEEDED"


class IncludeReadError(IncludeError):
    """Raised when an include target exists but cannot be read."""

    code = "READ_ERROR"


__all__ = [
    "IncludeError",
    "CircularIncludeError",
    "IncludeNotFoundError",
    "MaxIncludeDepthError",
    "IncludeReadError",
]
