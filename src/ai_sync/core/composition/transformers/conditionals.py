"""Target-conditional inline blocks.

Syntax::

    {{#claude}}Use /commands in Claude.{{/claude}}
    {{#!cursor}}Everything except Cursor.{{/!cursor}}
    {{#claude|factory}}Claude or Factory.{{/claude|factory}}
    {{#claude&!cursor}}Claude only.{{/claude&!cursor}}

The closing tag must repeat the opening condition byte for byte. Tags with
blanks inside the braces (``{{ #claude }}``) are not tags and stay as text.
Nested blocks are not interpreted: the first matching close ends the block
and anything inside is passed through verbatim.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Literal

from ...targets import is_valid_target
from .base import ContentTransformer, TransformContext

logger = logging.getLogger(__name__)

# Opening condition must not start or end with blanks; the close is a backreference.
BLOCK_PATTERN = re.compile(r"\{\{#([^\s}](?:[^}]*?[^\s}])?)\}\}(.*?)\{\{/\1\}\}", re.DOTALL)

_TRAILING_BLANKS_RE = re.compile(r"[ \t]+$", re.MULTILINE)
_LEADING_NEWLINES_RE = re.compile(r"\A\n+")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_TRAILING_NEWLINES_RE = re.compile(r"\n{2,}\Z")


@dataclass(frozen=True)
class TargetCondition:
    """A parsed block condition.

    ``operator`` is ``or`` only when the text contains ``|`` and no ``&``;
    every other combination is ``and``.
    """

    targets: List[str] = field(default_factory=list)
    negated_targets: List[str] = field(default_factory=list)
    operator: Literal["or", "and"] = "and"

    @property
    def is_empty(self) -> bool:
        return not self.targets and not self.negated_targets


def parse_target_condition(condition: str) -> TargetCondition:
    """Parse ``claude``, ``!cursor``, ``claude|factory``, ``cursor&!claude``.

    Unknown platform names are dropped.
    """
    text = condition.strip()
    has_or = "|" in text
    has_and = "&" in text
    operator: Literal["or", "and"] = "or" if has_or and not has_and else "and"

    targets: List[str] = []
    negated: List[str] = []
    for part in re.split(r"[|&]", text):
        value = part.strip()
        if not value:
            continue
        if value.startswith("!"):
            name = value[1:].strip()
            if is_valid_target(name):
                negated.append(name)
        elif is_valid_target(value):
            targets.append(value)

    return TargetCondition(targets=targets, negated_targets=negated, operator=operator)


def evaluate_target_condition(parsed: TargetCondition, target: str) -> bool:
    """Return True if a block with ``parsed`` condition is kept for ``target``."""
    if parsed.is_empty:
        return False
    if target in parsed.negated_targets:
        return False
    if not parsed.targets:
        return True
    if parsed.operator == "or":
        return target in parsed.targets
    return all(value == target for value in parsed.targets)


def _collapse_whitespace(text: str) -> str:
    text = _TRAILING_BLANKS_RE.sub("", text)
    text = _LEADING_NEWLINES_RE.sub("", text)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    return _TRAILING_NEWLINES_RE.sub("\n", text)


class ConditionalContentTransformer(ContentTransformer):
    """Keep or drop ``{{#cond}}...{{/cond}}`` blocks for ``context.target``.

    When at least one block was replaced and whitespace is not preserved,
    trailing blanks are stripped, leading blank lines removed, runs of blank
    lines collapsed to one, and trailing newlines limited to one.
    """

    def transform(self, content: str, context: TransformContext) -> str:
        replaced = False

        def replacer(match: re.Match[str]) -> str:
            nonlocal replaced
            replaced = True
            condition, body = match.group(1), match.group(2)
            include = evaluate_target_condition(parse_target_condition(condition), context.target)
            context.record_block(include)
            logger.debug(
                "Block {{#%s}} %s for %s", condition, "kept" if include else "dropped", context.target
            )
            return body if include else ""

        result = BLOCK_PATTERN.sub(replacer, content)

        if replaced and not context.preserve_whitespace:
            result = _collapse_whitespace(result)
        return result


def transform_conditional_content(
    content: str,
    target: str,
    *,
    preserve_whitespace: bool = False,
) -> str:
    """Render ``content`` for one target platform.

    Example:
        >>> transform_conditional_content(
        ...     "# Guide\\n{{#claude}}Claude tip{{/claude}}{{#cursor}}Cursor tip{{/cursor}}\\n",
        ...     "claude",
        ... )
        '# Guide\\nClaude tip\\n'

    Raises:
        ValueError: If ``target`` is not a known platform.
    """
    context = TransformContext(target=target, preserve_whitespace=preserve_whitespace)
    return ConditionalContentTransformer().transform(content, context)


__all__ = [
    "BLOCK_PATTERN",
    "TargetCondition",
    "parse_target_condition",
    "evaluate_target_condition",
    "ConditionalContentTransformer",
    "transform_conditional_content",
]
