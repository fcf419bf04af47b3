"""Shared utilities (frontmatter handling, asynchronous file access)."""
from __future__ import annotations

from .frontmatter import (
    FRONTMATTER_PATTERN,
    ParsedDocument,
    extract_body_content,
    has_frontmatter,
    parse_frontmatter,
    split_frontmatter,
)
from .fs import dir_exists, file_exists, read_text

__all__ = [
    "FRONTMATTER_PATTERN",
    "ParsedDocument",
    "extract_body_content",
    "has_frontmatter",
    "parse_frontmatter",
    "split_frontmatter",
    "dir_exists",
    "file_exists",
    "read_text",
]
