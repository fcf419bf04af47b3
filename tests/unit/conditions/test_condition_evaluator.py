"""Tests for `when:` expression evaluation and the rule inclusion decision."""
from __future__ import annotations

import asyncio
from pathlib import Path
from types import SimpleNamespace

import pytest

from ai_sync.core.conditions.context import ProjectContext, build_project_context
from ai_sync.core.conditions.errors import ConditionParseError, ManifestError, UnknownNamespaceError
from ai_sync.core.conditions.evaluator import (
    evaluate_condition_expression,
    fold_logical_operators,
    should_include_rule,
)
from ai_sync.core.conditions.parser import parse_condition_expression
from helpers import write_json, write_text


@pytest.fixture
def react_project(tmp_path: Path) -> ProjectContext:
    """Project with react + typescript, a package.json `type`, and a .env file."""
    write_json(
        tmp_path / "package.json",
        {
            "name": "web",
            "type": "module",
            "private": True,
            "dependencies": {"react": "^18.2.0"},
            "devDependencies": {"typescript": "^5.3.0"},
        },
    )
    write_text(tmp_path / ".env", "SECRET=1\n")
    return build_project_context(tmp_path, {"env": "production", "replicas": 3})


def evaluate(expression: str, context: ProjectContext):
    return asyncio.run(evaluate_condition_expression(expression, context))


class TestFoldLogicalOperators:
    def test_left_to_right_without_precedence(self) -> None:
        # (True || False) && False  -> False; with && precedence it would be True.
        assert fold_logical_operators([True, False, False], ["||", "&&"]) is False

    def test_single_value(self) -> None:
        assert fold_logical_operators([True], []) is True

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError):
            fold_logical_operators([], [])


class TestEvaluateConditionExpression:
    def test_present_dependency(self, react_project: ProjectContext) -> None:
        result = evaluate("npm:react", react_project)
        assert result.matches is True
        assert result.ok
        assert result.reason == "All conditions satisfied"
        assert result.checked_identifiers == ("npm:react",)

    def test_absent_dependency(self, react_project: ProjectContext) -> None:
        result = evaluate("npm:vue", react_project)
        assert result.matches is False
        assert result.ok
        assert result.reason == "Condition failed"

    def test_and_or_regardless_of_last_term(self, react_project: ProjectContext) -> None:
        assert evaluate("npm:react && npm:typescript || npm:vue", react_project).matches is True

    def test_no_operator_precedence(self, react_project: ProjectContext) -> None:
        # (react || vue) && angular -> False
        assert evaluate("npm:react || npm:vue && npm:angular", react_project).matches is False

    def test_negation(self, react_project: ProjectContext) -> None:
        assert evaluate("!npm:vue", react_project).matches is True
        assert evaluate("!file:.env", react_project).matches is False

    def test_checked_identifiers_include_negation(self, react_project: ProjectContext) -> None:
        result = evaluate("npm:react && !file:.env", react_project)
        assert result.checked_identifiers == ("npm:react", "!file:.env")

    def test_single_quoted_value_with_operator_text(self, tmp_path: Path) -> None:
        context = build_project_context(tmp_path, {"mode": "a||b"})
        result = evaluate("var:mode == 'a||b'", context)
        assert result.ok
        assert result.matches is True

    def test_pkg_comparisons(self, react_project: ProjectContext) -> None:
        assert evaluate('pkg:type == "module"', react_project).matches is True
        assert evaluate("pkg:type != commonjs", react_project).matches is True
        assert evaluate("pkg:private == true", react_project).matches is True

    def test_var_comparisons(self, react_project: ProjectContext) -> None:
        assert evaluate("var:env == production", react_project).matches is True
        assert evaluate("var:replicas == 3", react_project).matches is True
        assert evaluate("var:env != production", react_project).matches is False

    def test_comparison_against_missing_value_is_false(self, react_project: ProjectContext) -> None:
        assert evaluate("pkg:license == MIT", react_project).matches is False
        assert evaluate("pkg:license != MIT", react_project).matches is False
        assert evaluate("!pkg:license == MIT", react_project).matches is True

    def test_existence_of_value_namespaces(self, react_project: ProjectContext) -> None:
        assert evaluate("pkg:name", react_project).matches is True
        assert evaluate("var:region", react_project).matches is False

    def test_accepts_parsed_expression(self, react_project: ProjectContext) -> None:
        parsed = parse_condition_expression("npm:typescript")
        assert asyncio.run(evaluate_condition_expression(parsed, react_project)).matches is True

    def test_parse_error_is_returned_not_raised(self, react_project: ProjectContext) -> None:
        result = evaluate("npm:react &&", react_project)
        assert result.matches is False
        assert isinstance(result.error, ConditionParseError)
        with pytest.raises(ConditionParseError):
            result.raise_for_error()

    def test_unknown_namespace_is_returned(self, react_project: ProjectContext) -> None:
        result = evaluate("bower:jquery", react_project)
        assert isinstance(result.error, UnknownNamespaceError)
        assert result.error.code == "UNKNOWN_NAMESPACE"

    def test_malformed_manifest_is_an_error_not_false(self, tmp_path: Path) -> None:
        write_text(tmp_path / "package.json", "{ broken")
        result = evaluate("npm:react", build_project_context(tmp_path))
        assert result.matches is False
        assert isinstance(result.error, ManifestError)

    def test_missing_manifest_is_false_not_error(self, tmp_path: Path) -> None:
        result = evaluate("cargo:serde", build_project_context(tmp_path))
        assert result.ok
        assert result.matches is False


class TestShouldIncludeRule:
    def test_no_when_field_is_included(self, react_project: ProjectContext) -> None:
        decision = asyncio.run(should_include_rule({"name": "general"}, react_project))
        assert decision.include is True
        assert decision.reason == "No condition provided, defaulting to include"

    @pytest.mark.parametrize("frontmatter", [None, {}, {"when": ""}, {"when": "   "}])
    def test_empty_conditions_are_included(self, react_project: ProjectContext, frontmatter) -> None:
        assert asyncio.run(should_include_rule(frontmatter, react_project)).include is True

    def test_nonexistent_dependency_excludes(self, react_project: ProjectContext) -> None:
        decision = asyncio.run(should_include_rule({"when": "npm:nonexistent"}, react_project))
        assert decision.include is False
        assert decision.ok

    def test_matching_condition_includes(self, react_project: ProjectContext) -> None:
        decision = asyncio.run(should_include_rule({"when": "npm:react"}, react_project))
        assert decision.include is True
        assert decision.reason == "All conditions satisfied"

    def test_accepts_object_with_when_attribute(self, react_project: ProjectContext) -> None:
        decision = asyncio.run(should_include_rule(SimpleNamespace(when="npm:vue"), react_project))
        assert decision.include is False

    def test_non_string_when_is_an_error(self, react_project: ProjectContext) -> None:
        decision = asyncio.run(should_include_rule({"when": ["npm:react"]}, react_project))
        assert decision.include is False
        assert isinstance(decision.error, ConditionParseError)

    def test_invalid_when_surfaces_error(self, react_project: ProjectContext) -> None:
        decision = asyncio.run(should_include_rule({"when": "react"}, react_project))
        assert decision.include is False
        assert isinstance(decision.error, UnknownNamespaceError)
