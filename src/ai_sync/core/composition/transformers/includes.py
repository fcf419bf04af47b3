"""Resolve `@include` directives in markdown documents.

Handles lines of the form (optionally indented)::

    @include shared/testing-basics.md

Only ``.md`` targets are recognized. The directive line is replaced by the
target's body with its frontmatter stripped, after the target's own
directives have been resolved. Top-level directives resolve against
``base_dir``; nested ones against the directory of the file that contains
them.

The top-level document's own frontmatter prologue is never scanned.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Union

from ...utils.frontmatter import extract_body_content, split_frontmatter
from ...utils.fs import read_text
from ..errors import (
    CircularIncludeError,
    IncludeError,
    IncludeNotFoundError,
    IncludeReadError,
    MaxIncludeDepthError,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10

# Directive line: `@include <path>.md`, leading/trailing blanks allowed.
INCLUDE_PATTERN = re.compile(r"^[ \t]*@include[ \t]+(.+?\.md)[ \t]*(?=\r?$)", re.MULTILINE)

OnInclude = Callable[[str, str], None]


@dataclass(frozen=True)
class IncludeMatch:
    """One `@include` directive located in a document."""

    path: str
    start: int
    end: int
    line: str


@dataclass(frozen=True)
class IncludeResolution:
    """Outcome of :func:`resolve_includes`.

    Attributes:
        content: Document with every directive replaced (empty on failure)
        has_includes: Whether the top-level document contained directives
        included_files: Every file spliced in, in splice order (duplicates kept)
        error: The failure that stopped resolution, if any
    """

    content: str
    has_includes: bool = False
    included_files: List[str] = field(default_factory=list)
    error: Optional[IncludeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "IncludeResolution":
        if self.error is not None:
            raise self.error
        return self


def find_includes(content: str) -> List[IncludeMatch]:
    """Return every include directive in ``content``, in document order."""
    return [
        IncludeMatch(path=m.group(1).strip(), start=m.start(), end=m.end(), line=m.group(0))
        for m in INCLUDE_PATTERN.finditer(content)
    ]


def _normalize(path: Union[str, Path], base_dir: Union[str, Path]) -> str:
    return os.path.abspath(os.path.join(base_dir, path))


class IncludeResolver:
    """Recursively expand `@include` directives with cycle and depth checks.

    The include chain (files currently being expanded on the active path) is
    passed explicitly through each level, so errors can report it and the
    depth limit does not depend on the interpreter's recursion limit.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, on_include: Optional[OnInclude] = None) -> None:
        """Initialize with maximum nesting depth.

        Args:
            max_depth: Maximum include depth; 0 disallows includes entirely
            on_include: Called as ``on_include(include_path, resolved_path)``
                after each successful splice
        """
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        self.max_depth = max_depth
        self.on_include = on_include

    async def resolve(
        self,
        content: str,
        current_file: Union[str, Path],
        base_dir: Union[str, Path],
    ) -> IncludeResolution:
        """Resolve all directives in ``content``; never raises IncludeError."""
        current = os.path.abspath(current_file)
        prologue, body = split_frontmatter(content)
        has_includes = bool(INCLUDE_PATTERN.search(body))
        if not has_includes:
            return IncludeResolution(content=content)

        included_files: List[str] = []
        try:
            resolved = await self._expand(
                body,
                source_file=current,
                lookup_dir=os.path.abspath(base_dir),
                chain=[current],
                depth=0,
                included_files=included_files,
            )
        except IncludeError as e:
            logger.debug("Include resolution failed for %s: %s", current, e)
            return IncludeResolution(content="", has_includes=True, error=e)

        return IncludeResolution(
            content=prologue + resolved,
            has_includes=True,
            included_files=included_files,
        )

    async def _expand(
        self,
        content: str,
        *,
        source_file: str,
        lookup_dir: str,
        chain: List[str],
        depth: int,
        included_files: List[str],
    ) -> str:
        parts: List[str] = []
        cursor = 0
        for match in find_includes(content):
            target = _normalize(match.path, lookup_dir)

            if target in chain:
                cycle = chain[chain.index(target):] + [target]
                raise CircularIncludeError(
                    f"Circular include detected: {' -> '.join(cycle)}",
                    include_path=target,
                    source_file=source_file,
                    chain=cycle,
                )
            if depth + 1 > self.max_depth:
                raise MaxIncludeDepthError(
                    f"Include depth exceeded {self.max_depth} at {match.path}",
                    include_path=target,
                    source_file=source_file,
                    max_depth=self.max_depth,
                )

            text = await self._read(match.path, target, source_file)
            included_files.append(target)
            nested = await self._expand(
                extract_body_content(text),
                source_file=target,
                lookup_dir=os.path.dirname(target),
                chain=chain + [target],
                depth=depth + 1,
                included_files=included_files,
            )

            logger.debug("Included %s into %s", target, source_file)
            if self.on_include is not None:
                self.on_include(match.path, target)

            parts.append(content[cursor:match.start])
            parts.append(nested)
            cursor = match.end

        parts.append(content[cursor:])
        return "".join(parts)

    async def _read(self, include_path: str, target: str, source_file: str) -> str:
        try:
            return await read_text(target)
        except FileNotFoundError as e:
            raise IncludeNotFoundError(
                f"Include file not found: {include_path} (resolved to {target})",
                include_path=target,
                source_file=source_file,
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise IncludeReadError(
                f"Cannot read include {include_path}: {e}",
                include_path=target,
                source_file=source_file,
            ) from e


async def resolve_includes(
    content: str,
    current_file: Union[str, Path],
    *,
    base_dir: Union[str, Path],
    max_depth: int = DEFAULT_MAX_DEPTH,
    on_include: Optional[OnInclude] = None,
) -> IncludeResolution:
    """Resolve every `@include` directive in ``content``.

    Args:
        content: Document text (a leading frontmatter block is left untouched)
        current_file: Path of the document (relative to the working
            directory or absolute), used for cycle detection
        base_dir: Directory top-level directives resolve against
        max_depth: Maximum include depth (0 disallows includes)
        on_include: Optional per-splice callback

    Returns:
        IncludeResolution; on failure ``error`` is set and ``content`` is empty.
    """
    resolver = IncludeResolver(max_depth=max_depth, on_include=on_include)
    return await resolver.resolve(content, current_file, base_dir)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "INCLUDE_PATTERN",
    "IncludeMatch",
    "IncludeResolution",
    "IncludeResolver",
    "find_includes",
    "resolve_includes",
]
