"""Document composition pipeline.

Runs a loader-supplied document through the three composition stages:

1. INCLUDES    - `@include path.md` directives are expanded (once per document)
2. WHEN        - the frontmatter `when:` expression decides participation
3. CONDITIONAL - `{{#target}}` blocks are rendered (once per target)

Frontmatter inheritance and output generation happen elsewhere; the pipeline
returns plain text per target.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..conditions.context import ProjectContext, build_project_context
from ..conditions.evaluator import should_include_rule
from ..exceptions import DocumentError
from ..targets import DEFAULT_TARGETS, normalize_targets
from ..utils.frontmatter import parse_frontmatter
from ..utils.fs import read_text
from .transformers.base import TransformContext, TransformerPipeline
from .transformers.conditionals import ConditionalContentTransformer
from .transformers.includes import DEFAULT_MAX_DEPTH, IncludeResolver

logger = logging.getLogger(__name__)


@dataclass
class ComposedDocument:
    """A document after composition.

    Attributes:
        path: Source document path
        frontmatter: Parsed frontmatter of the source document
        included: Whether the `when:` condition let the document through
        reason: Explanation of the inclusion decision
        included_files: Files spliced in by `@include`, in splice order
        body: Body after include resolution, before target rendering
        bodies: Rendered body per target (empty when not included)
    """

    path: str
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    included: bool = True
    reason: str = ""
    included_files: List[str] = field(default_factory=list)
    body: str = ""
    bodies: Dict[str, str] = field(default_factory=dict)


class DocumentPipeline:
    """Compose documents for every enabled target.

    One pipeline owns one :class:`ProjectContext`, so every document composed
    through it sees the same manifest answers.
    """

    def __init__(
        self,
        context: ProjectContext,
        *,
        targets: Optional[Sequence[str]] = None,
        max_include_depth: int = DEFAULT_MAX_DEPTH,
        preserve_whitespace: bool = False,
    ) -> None:
        self.context = context
        self.targets = normalize_targets(list(targets) if targets is not None else list(DEFAULT_TARGETS))
        self.include_resolver = IncludeResolver(max_depth=max_include_depth)
        self.preserve_whitespace = preserve_whitespace
        self.renderer = TransformerPipeline([ConditionalContentTransformer()])

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        project_root: Union[str, Path],
        *,
        targets: Optional[Sequence[str]] = None,
    ) -> "DocumentPipeline":
        """Build a pipeline (and a fresh project context) from loaded config."""
        composition = config.get("composition") or {}
        context = build_project_context(project_root, config.get("variables") or {})
        return cls(
            context,
            targets=targets if targets is not None else config.get("targets"),
            max_include_depth=int(composition.get("max_include_depth", DEFAULT_MAX_DEPTH)),
            preserve_whitespace=bool(composition.get("preserve_whitespace", False)),
        )

    def render(self, body: str, target: str) -> str:
        """Render an include-resolved body for one target."""
        context = TransformContext(target=target, preserve_whitespace=self.preserve_whitespace)
        result = self.renderer.execute(body, context)
        logger.debug(
            "Rendered for %s: %d block(s) kept, %d dropped",
            target,
            context.blocks_included,
            context.blocks_excluded,
        )
        return result

    async def compose(self, path: Union[str, Path], text: Optional[str] = None) -> ComposedDocument:
        """Compose one document.

        Args:
            path: Document path (includes resolve against its directory)
            text: Raw document text; read from ``path`` when omitted

        Raises:
            DocumentError: When the document cannot be read, has invalid
                frontmatter, or an include or `when:` evaluation fails.
        """
        doc_path = Path(path)
        if text is None:
            try:
                text = await read_text(doc_path)
            except (OSError, UnicodeDecodeError) as e:
                raise DocumentError(f"Cannot read {doc_path}: {e}", path=str(doc_path)) from e

        try:
            parsed = parse_frontmatter(text)
        except ValueError as e:
            raise DocumentError(f"{doc_path}: {e}", path=str(doc_path)) from e

        resolution = await self.include_resolver.resolve(
            parsed.content, doc_path, base_dir=doc_path.parent
        )
        if resolution.error is not None:
            raise DocumentError(
                f"{doc_path}: {resolution.error}", path=str(doc_path), cause=resolution.error
            ) from resolution.error

        decision = await should_include_rule(parsed.frontmatter, self.context)
        if decision.error is not None:
            raise DocumentError(
                f"{doc_path}: invalid 'when' condition: {decision.error}",
                path=str(doc_path),
                cause=decision.error,
            ) from decision.error

        composed = ComposedDocument(
            path=str(doc_path),
            frontmatter=parsed.frontmatter,
            included=decision.include,
            reason=decision.reason,
            included_files=list(resolution.included_files),
            body=resolution.content,
        )
        if not decision.include:
            logger.info("Skipping %s: %s", doc_path, decision.reason)
            return composed

        for target in self.targets:
            composed.bodies[target] = self.render(resolution.content, target)
        return composed

    async def compose_many(self, paths: Sequence[Union[str, Path]]) -> List[ComposedDocument]:
        """Compose documents sequentially, stopping at the first failure."""
        results: List[ComposedDocument] = []
        for path in paths:
            results.append(await self.compose(path))
        return results


__all__ = ["ComposedDocument", "DocumentPipeline"]
