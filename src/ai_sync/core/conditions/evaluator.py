"""Evaluation of `when:` condition expressions against a ProjectContext.

Operators are applied strictly in written order with no precedence between
``&&`` and ``||``::

    a || b && c   ==   (a || b) && c
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from .context import MISSING, ProjectContext, stringify_value
from .errors import ConditionError, ConditionParseError, ManifestError
from .models import ConditionExpression, ConditionTerm
from .parser import parse_condition_expression

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConditionEvaluation:
    """Outcome of evaluating one expression.

    Attributes:
        matches: Whether the expression holds (False when ``error`` is set)
        reason: Human-readable explanation
        checked_identifiers: Terms evaluated, formatted ``[!]namespace:name``
        error: The parse or I/O failure, if evaluation did not complete
    """

    matches: bool
    reason: str = ""
    checked_identifiers: Tuple[str, ...] = field(default_factory=tuple)
    error: Optional[ConditionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "ConditionEvaluation":
        if self.error is not None:
            raise self.error
        return self


@dataclass(frozen=True)
class InclusionDecision:
    """Whether a document participates in the run."""

    include: bool
    reason: str = ""
    error: Optional[ConditionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "InclusionDecision":
        if self.error is not None:
            raise self.error
        return self


def format_term(term: ConditionTerm) -> str:
    prefix = "!" if term.negated else ""
    return f"{prefix}{term.identifier.namespace}:{term.identifier.name}"


async def evaluate_term(term: ConditionTerm, context: ProjectContext) -> bool:
    """Evaluate a single term, applying its negation.

    A comparison against a missing value is false before negation.

    Raises:
        ManifestError: On unreadable or malformed manifests.
    """
    exists, value = await context.lookup(term.identifier)

    if term.operator is None:
        result = exists
    elif value is MISSING:
        result = False
    else:
        equal = stringify_value(value) == term.value
        result = equal if term.operator == "==" else not equal

    return not result if term.negated else result


def fold_logical_operators(values: Sequence[bool], operators: Sequence[str]) -> bool:
    """Fold ``values`` left to right: ``acc = acc OP next``."""
    if not values:
        raise ValueError("Cannot fold an empty list of condition values")
    acc = values[0]
    for op, value in zip(operators, values[1:]):
        if op == "&&":
            acc = acc and value
        else:
            acc = acc or value
    return acc


async def evaluate_condition_expression(
    expression: Union[str, ConditionExpression],
    context: ProjectContext,
) -> ConditionEvaluation:
    """Parse and evaluate ``expression``.

    Never raises for parse or manifest failures; they are returned in
    :attr:`ConditionEvaluation.error`.

    Example:
        >>> ctx = build_project_context("/path/to/project")
        >>> result = asyncio.run(evaluate_condition_expression("npm:react", ctx))
        >>> result.matches
        True
    """
    source = str(expression)
    try:
        parsed = (
            expression
            if isinstance(expression, ConditionExpression)
            else parse_condition_expression(expression)
        )
        values: List[bool] = []
        for term in parsed.conditions:
            values.append(await evaluate_term(term, context))
        matches = fold_logical_operators(values, parsed.operators)
    except ConditionError as e:
        logger.debug("Condition %r failed: %s", source, e)
        return ConditionEvaluation(matches=False, reason=str(e), error=e)
    except OSError as e:
        error = ManifestError(f"I/O error while evaluating {source!r}: {e}", expression=source)
        logger.debug("Condition %r failed: %s", source, error)
        return ConditionEvaluation(matches=False, reason=str(error), error=error)

    checked = tuple(format_term(term) for term in parsed.conditions)
    reason = "All conditions satisfied" if matches else "Condition failed"
    logger.debug("Condition %r -> %s (%s)", source, matches, ", ".join(checked))
    return ConditionEvaluation(matches=matches, reason=reason, checked_identifiers=checked)


def _when_of(frontmatter: Any) -> Any:
    if frontmatter is None:
        return None
    if isinstance(frontmatter, Mapping):
        return frontmatter.get("when")
    return getattr(frontmatter, "when", None)


async def should_include_rule(frontmatter: Any, context: ProjectContext) -> InclusionDecision:
    """Decide whether a document participates, based on its ``when:`` field.

    Args:
        frontmatter: Parsed frontmatter mapping, or any object with a ``when``
            attribute
        context: Project context for the current run

    Returns:
        InclusionDecision; documents without a ``when:`` always participate.
    """
    when = _when_of(frontmatter)
    if when is None or (isinstance(when, str) and not when.strip()):
        return InclusionDecision(include=True, reason="No condition provided, defaulting to include")
    if not isinstance(when, str):
        error = ConditionParseError(
            f"'when' must be a string expression, got {type(when).__name__}",
            expression=str(when),
        )
        return InclusionDecision(include=False, reason=str(error), error=error)

    evaluation = await evaluate_condition_expression(when, context)
    return InclusionDecision(include=evaluation.matches, reason=evaluation.reason, error=evaluation.error)


__all__ = [
    "ConditionEvaluation",
    "InclusionDecision",
    "evaluate_term",
    "evaluate_condition_expression",
    "fold_logical_operators",
    "format_term",
    "should_include_rule",
]
