"""Document composition: includes, `when:` decisions, per-target rendering."""
from __future__ import annotations

from .errors import (
    CircularIncludeError,
    IncludeError,
    IncludeNotFoundError,
    IncludeReadError,
    MaxIncludeDepthError,
)
from .pipeline import ComposedDocument, DocumentPipeline
from .transformers import (
    IncludeResolution,
    IncludeResolver,
    find_includes,
    resolve_includes,
    transform_conditional_content,
)

__all__ = [
    "ComposedDocument",
    "DocumentPipeline",
    "IncludeResolution",
    "IncludeResolver",
    "find_includes",
    "resolve_includes",
    "transform_conditional_content",
    "IncludeError",
    "CircularIncludeError",
    "IncludeNotFoundError",
    "MaxIncludeDepthError",
    "IncludeReadError",
]
