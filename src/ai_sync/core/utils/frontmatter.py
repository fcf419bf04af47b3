"""YAML frontmatter parsing utilities.

Rule, persona, and command documents carry their metadata in a YAML block
delimited by '---' lines at the very start of the file.

Example:
    ```yaml
    ---
    name: react-patterns
    when: npm:react && !npm:preact
    globs: ["src/**/*.tsx"]
    ---

    # React Patterns
    ```
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import yaml


# Matches the first pair of '---' markers at the very start of the content.
FRONTMATTER_PATTERN = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)", re.DOTALL)

# Same block with no content between the markers.
_EMPTY_FRONTMATTER_PATTERN = re.compile(r"^---[ \t]*\r?\n---[ \t]*(?:\r?\n|$)")


@dataclass
class ParsedDocument:
    """Result of parsing a document with YAML frontmatter.

    Attributes:
        frontmatter: Parsed YAML frontmatter as a dictionary
        content: The markdown content after the frontmatter
        raw_frontmatter: The raw YAML string (for debugging)
    """
    frontmatter: Dict[str, Any]
    content: str
    raw_frontmatter: str


def split_frontmatter(content: str) -> Tuple[str, str]:
    """Split ``content`` into its frontmatter prologue and body.

    The prologue is returned verbatim, delimiters included, so that
    ``prologue + body == content`` always holds.
    """
    match = FRONTMATTER_PATTERN.match(content) or _EMPTY_FRONTMATTER_PATTERN.match(content)
    if not match:
        return "", content
    return content[: match.end()], content[match.end():]


def has_frontmatter(content: str) -> bool:
    """Check if content starts with a '---' delimited frontmatter block."""
    prologue, _ = split_frontmatter(content)
    return bool(prologue)


def extract_body_content(content: str) -> str:
    """Return ``content`` without its leading frontmatter block (if any)."""
    _, body = split_frontmatter(content)
    return body


def parse_frontmatter(content: str) -> ParsedDocument:
    """Parse YAML frontmatter from markdown content.

    Args:
        content: Full markdown content including frontmatter

    Returns:
        ParsedDocument with frontmatter dict, content, and raw YAML

    Raises:
        ValueError: If the YAML is invalid or is not a mapping

    Example:
        >>> doc = parse_frontmatter('''---
        ... name: react
        ... when: npm:react
        ... ---
        ... # React
        ... ''')
        >>> doc.frontmatter['when']
        'npm:react'
        >>> doc.content.strip()
        '# React'
    """
    prologue, body = split_frontmatter(content)
    if not prologue:
        return ParsedDocument(frontmatter={}, content=content, raw_frontmatter="")

    match = FRONTMATTER_PATTERN.match(prologue)
    raw_yaml = match.group(1) if match else ""

    try:
        parsed = yaml.safe_load(raw_yaml) if raw_yaml.strip() else None
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in frontmatter: {e}") from e
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Frontmatter must be a YAML mapping, got {type(parsed).__name__}")

    return ParsedDocument(frontmatter=parsed, content=body, raw_frontmatter=raw_yaml)


__all__ = [
    "FRONTMATTER_PATTERN",
    "ParsedDocument",
    "split_frontmatter",
    "has_frontmatter",
    "extract_body_content",
    "parse_frontmatter",
]
