"""Parser for the `when:` condition language.

Grammar::

    expression := term (("&&" | "||") term)*
    term       := ["!"] identifier [("==" | "!=") value]      # comparison: pkg/var only
    identifier := namespace ":" (bare-name | '"' quoted-name '"')
    value      := bare-word | '"' text '"' | "'" text "'"

Examples:
    npm:react
    !file:"docs/style guide.md"
    pkg:type == "module" && !npm:jest || pip:pytest

There is no operator precedence: ``&&`` and ``||`` are folded strictly in
written order by the evaluator.
"""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

from .errors import ConditionParseError, UnknownNamespaceError
from .models import (
    COMPARISON_OPERATORS,
    VALID_NAMESPACES,
    VALUE_NAMESPACES,
    ConditionExpression,
    ConditionTerm,
    Identifier,
)

_NAMESPACE_RE = re.compile(r"([A-Za-z]+):")


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _scan_quoted(text: str, pos: int, fragment: str) -> Tuple[str, int]:
    """Read a quoted literal starting at ``text[pos]``; return (inner, end)."""
    quote = text[pos]
    close = text.find(quote, pos + 1)
    if close == -1:
        raise ConditionParseError(
            f"Unterminated quoted string in {fragment!r}",
            expression=fragment,
            position=pos,
        )
    return text[pos + 1 : close], close + 1


def _scan_identifier(text: str, pos: int) -> Tuple[Identifier, int]:
    """Scan ``namespace:name`` starting at ``pos``.

    A bare name stops at whitespace, ``==``, ``!=`` or the end of the text.
    """
    match = _NAMESPACE_RE.match(text, pos)
    if not match:
        token = text[pos:].split(None, 1)[0] if text[pos:].strip() else text[pos:]
        raise UnknownNamespaceError(
            f'Invalid identifier "{token}". Expected "namespace:name" with namespace one of: '
            f"{', '.join(VALID_NAMESPACES)}",
            expression=token,
            position=pos,
        )

    namespace = match.group(1).lower()
    if namespace not in VALID_NAMESPACES:
        token = text[pos:].split(None, 1)[0]
        raise UnknownNamespaceError(
            f'Unknown namespace "{match.group(1)}" in "{token}". Valid: {", ".join(VALID_NAMESPACES)}',
            expression=token,
            position=pos,
        )

    pos = match.end()
    if pos < len(text) and text[pos] == '"':
        name, pos = _scan_quoted(text, pos, text)
    else:
        start = pos
        while pos < len(text):
            if text[pos].isspace() or text.startswith(COMPARISON_OPERATORS, pos):
                break
            pos += 1
        name = text[start:pos]

    if not name:
        raise ConditionParseError(
            f"Missing name after '{namespace}:' in {text.strip()!r}",
            expression=text.strip(),
            position=pos,
        )
    return Identifier(namespace=namespace, name=name), pos


def parse_identifier(token: str) -> Identifier:
    """Parse a single namespaced identifier.

    Examples:
        >>> parse_identifier("npm:@scope/package")
        Identifier(namespace='npm', name='@scope/package')
        >>> parse_identifier('file:"docs/a b.md"').name
        'docs/a b.md'

    Raises:
        UnknownNamespaceError: If the prefix is missing or not supported.
        ConditionParseError: If the name is empty or trailing text remains.
    """
    text = token.strip()
    identifier, pos = _scan_identifier(text, 0)
    if pos != len(text):
        raise ConditionParseError(
            f"Unexpected text after identifier: {text[pos:]!r}",
            expression=text,
            position=pos,
        )
    return identifier


def _parse_value(text: str, pos: int) -> Tuple[str, int]:
    if pos >= len(text):
        raise ConditionParseError(
            f"Missing value after comparison operator in {text!r}",
            expression=text,
            position=pos,
        )
    if text[pos] in ('"', "'"):
        return _scan_quoted(text, pos, text)
    start = pos
    while pos < len(text) and not text[pos].isspace():
        pos += 1
    return text[start:pos], pos


def parse_condition_term(term: str) -> ConditionTerm:
    """Parse one condition term.

    Formats:
        npm:react                 existence check
        !npm:react                negated existence check
        pkg:type == "module"      comparison (pkg/var namespaces only)
        !var:env != production    negated comparison

    Raises:
        UnknownNamespaceError: For an unknown or missing namespace.
        ConditionParseError: For any other malformed term.
    """
    text = term.strip()
    if not text:
        raise ConditionParseError("Empty condition term", expression=term)

    pos = 0
    negated = False
    if text[0] == "!":
        negated = True
        pos = _skip_ws(text, 1)
        if pos == len(text):
            raise ConditionParseError("Missing identifier after '!'", expression=text, position=pos)

    identifier, pos = _scan_identifier(text, pos)
    pos = _skip_ws(text, pos)

    if pos == len(text):
        return ConditionTerm(identifier=identifier, negated=negated)

    operator = text[pos : pos + 2]
    if operator not in COMPARISON_OPERATORS:
        raise ConditionParseError(
            f"Unexpected text {text[pos:]!r} in condition {text!r}; "
            f"expected end of term or one of {', '.join(COMPARISON_OPERATORS)}",
            expression=text,
            position=pos,
            code="INVALID_OPERATOR",
        )
    if identifier.namespace not in VALUE_NAMESPACES:
        raise ConditionParseError(
            f"Comparison is only supported for {', '.join(VALUE_NAMESPACES)} "
            f"namespaces, not '{identifier.namespace}' in {text!r}",
            expression=text,
            position=pos,
            code="INVALID_OPERATOR",
        )

    value, pos = _parse_value(text, _skip_ws(text, pos + 2))
    if _skip_ws(text, pos) != len(text):
        raise ConditionParseError(
            f"Unexpected text after value: {text[pos:].strip()!r}",
            expression=text,
            position=pos,
        )
    return ConditionTerm(identifier=identifier, negated=negated, operator=operator, value=value)


def split_condition_expression(expression: str) -> Tuple[List[str], List[str]]:
    """Split on top-level ``&&`` / ``||`` (outside quoted literals).

    Returns:
        (segments, operators) with ``len(operators) == len(segments) - 1``.
    """
    segments: List[str] = []
    operators: List[str] = []
    start = 0
    pos = 0
    quote: Optional[str] = None
    while pos < len(expression):
        ch = expression[pos]
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in ('"', "'"):
            quote = ch
        elif expression.startswith(("&&", "||"), pos):
            segments.append(expression[start:pos])
            operators.append(expression[pos : pos + 2])
            pos += 2
            start = pos
            continue
        pos += 1
    segments.append(expression[start:])
    return segments, operators


def parse_condition_expression(expression: str) -> ConditionExpression:
    """Parse a full `when:` expression into terms and logical operators.

    Raises:
        ConditionParseError: If the expression is empty, an operator has no
            operand, or a term is malformed.
        UnknownNamespaceError: If a term uses an unsupported namespace.
    """
    if expression is None or not str(expression).strip():
        raise ConditionParseError("Empty condition expression", expression=expression or "")

    segments, operators = split_condition_expression(expression)
    conditions: List[ConditionTerm] = []
    offset = 0
    for index, segment in enumerate(segments):
        if not segment.strip():
            if index == 0:
                message = f"Missing condition before '{operators[0]}'"
            elif index == len(segments) - 1:
                message = "Trailing logical operator without condition"
            else:
                message = "Missing condition between logical operators"
            raise ConditionParseError(message, expression=expression, position=offset)
        conditions.append(parse_condition_term(segment))
        offset += len(segment) + 2

    return ConditionExpression(conditions=tuple(conditions), operators=tuple(operators))


__all__ = [
    "parse_identifier",
    "parse_condition_term",
    "parse_condition_expression",
    "split_condition_expression",
]
