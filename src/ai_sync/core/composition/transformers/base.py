"""Base class for per-target content transformers.

A document that survived include resolution and its `when:` check is rendered
once per target platform by running a :class:`TransformerPipeline` over its
body. Each transformer handles one kind of markup.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from ...targets import is_valid_target


@dataclass
class TransformContext:
    """Context provided to transformers while rendering one target.

    Attributes:
        target: Target platform being rendered (cursor, claude, factory)
        preserve_whitespace: Keep text around removed blocks byte-for-byte
        blocks_included: Conditional blocks kept for this target
        blocks_excluded: Conditional blocks dropped for this target
    """

    target: str
    preserve_whitespace: bool = False

    blocks_included: int = 0
    blocks_excluded: int = 0

    def __post_init__(self) -> None:
        if not is_valid_target(self.target):
            raise ValueError(f"Unknown target: {self.target!r}")

    @property
    def blocks_evaluated(self) -> int:
        return self.blocks_included + self.blocks_excluded

    def record_block(self, included: bool) -> None:
        """Record that a conditional block was evaluated."""
        if included:
            self.blocks_included += 1
        else:
            self.blocks_excluded += 1


class ContentTransformer(ABC):
    """Abstract base class for content transformers.

    Transformers are stateless and receive context through transform().
    """

    @abstractmethod
    def transform(self, content: str, context: TransformContext) -> str:
        """Transform content for ``context.target``."""
        ...

    def get_name(self) -> str:
        """Get transformer name for logging/debugging."""
        return self.__class__.__name__


class TransformerPipeline:
    """Execute a sequence of transformers on content.

    Example:
        pipeline = TransformerPipeline([ConditionalContentTransformer()])
        body = pipeline.execute(content, TransformContext(target="claude"))
    """

    def __init__(self, transformers: List[ContentTransformer]) -> None:
        self.transformers = transformers

    def execute(self, content: str, context: TransformContext) -> str:
        result = content
        for transformer in self.transformers:
            result = transformer.transform(result, context)
        return result

    def add_transformer(self, transformer: ContentTransformer) -> None:
        """Add a transformer to the end of the pipeline."""
        self.transformers.append(transformer)
