"""Content transformers for document composition.

- base: transformer base class, per-target context and pipeline
- includes: `@include` resolution (structural, runs once per document)
- conditionals: `{{#target}}` blocks (runs once per target)
"""
from __future__ import annotations

from .base import ContentTransformer, TransformContext, TransformerPipeline
from .conditionals import (
    ConditionalContentTransformer,
    TargetCondition,
    evaluate_target_condition,
    parse_target_condition,
    transform_conditional_content,
)
from .includes import (
    DEFAULT_MAX_DEPTH,
    IncludeMatch,
    IncludeResolution,
    IncludeResolver,
    find_includes,
    resolve_includes,
)

__all__ = [
    # Base classes
    "ContentTransformer",
    "TransformContext",
    "TransformerPipeline",
    # Conditionals
    "ConditionalContentTransformer",
    "TargetCondition",
    "evaluate_target_condition",
    "parse_target_condition",
    "transform_conditional_content",
    # Includes
    "DEFAULT_MAX_DEPTH",
    "IncludeMatch",
    "IncludeResolution",
    "IncludeResolver",
    "find_includes",
    "resolve_includes",
]
