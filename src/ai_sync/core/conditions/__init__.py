"""The `when:` condition language.

- models: Identifier, ConditionTerm, ConditionExpression
- parser: identifier / term / expression parsing
- manifests: per-ecosystem dependency readers
- context: run-scoped ProjectContext with memoized lookups
- evaluator: expression evaluation and the rule inclusion decision
"""
from __future__ import annotations

from .context import ProjectContext, build_project_context
from .errors import ConditionError, ConditionParseError, ManifestError, UnknownNamespaceError
from .evaluator import (
    ConditionEvaluation,
    InclusionDecision,
    evaluate_condition_expression,
    should_include_rule,
)
from .models import (
    PACKAGE_ECOSYSTEMS,
    VALID_NAMESPACES,
    ConditionExpression,
    ConditionTerm,
    Identifier,
)
from .parser import parse_condition_expression, parse_condition_term, parse_identifier

__all__ = [
    # Models
    "Identifier",
    "ConditionTerm",
    "ConditionExpression",
    "PACKAGE_ECOSYSTEMS",
    "VALID_NAMESPACES",
    # Parsing
    "parse_identifier",
    "parse_condition_term",
    "parse_condition_expression",
    # Context
    "ProjectContext",
    "build_project_context",
    # Evaluation
    "ConditionEvaluation",
    "InclusionDecision",
    "evaluate_condition_expression",
    "should_include_rule",
    # Errors
    "ConditionError",
    "ConditionParseError",
    "UnknownNamespaceError",
    "ManifestError",
]
