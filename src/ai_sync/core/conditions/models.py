"""
Data models for the `when:` condition language.

- Identifier: a namespaced reference such as ``npm:react`` or ``file:"a b.json"``
- ConditionTerm: one boolean atom (negation, identifier, optional comparison)
- ConditionExpression: terms joined by ``&&`` / ``||``, folded left to right
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple

PACKAGE_ECOSYSTEMS: Tuple[str, ...] = (
    "npm",  # package.json
    "pip",  # requirements.txt, pyproject.toml, Pipfile
    "go",  # go.mod
    "cargo",  # Cargo.toml
    "composer",  # composer.json
    "gem",  # Gemfile
    "pub",  # pubspec.yaml
    "maven",  # pom.xml
    "gradle",  # build.gradle(.kts)
    "nuget",  # *.csproj, packages.config
)
PATH_NAMESPACES: Tuple[str, ...] = ("file", "dir")
VALUE_NAMESPACES: Tuple[str, ...] = ("pkg", "var")
VALID_NAMESPACES: Tuple[str, ...] = PACKAGE_ECOSYSTEMS + PATH_NAMESPACES + VALUE_NAMESPACES

ComparisonOperator = Literal["==", "!="]
LogicalOperator = Literal["&&", "||"]

COMPARISON_OPERATORS: Tuple[str, ...] = ("==", "!=")
LOGICAL_OPERATORS: Tuple[str, ...] = ("&&", "||")


@dataclass(frozen=True)
class Identifier:
    """A namespaced reference like ``npm:@scope/pkg``."""

    namespace: str
    name: str

    def __str__(self) -> str:
        if any(ch.isspace() for ch in self.name):
            return f'{self.namespace}:"{self.name}"'
        return f"{self.namespace}:{self.name}"


@dataclass(frozen=True)
class ConditionTerm:
    """A single condition: existence check or value comparison."""

    identifier: Identifier
    negated: bool = False
    operator: Optional[str] = None
    value: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.operator is None) != (self.value is None):
            raise ValueError("A condition term carries a value if and only if it has an operator")
        if self.operator is not None and self.operator not in COMPARISON_OPERATORS:
            raise ValueError(f"Unsupported comparison operator: {self.operator}")

    @property
    def is_comparison(self) -> bool:
        return self.operator is not None

    def __str__(self) -> str:
        prefix = "!" if self.negated else ""
        text = f"{prefix}{self.identifier}"
        if self.operator is not None:
            text += f' {self.operator} "{self.value}"'
        return text


@dataclass(frozen=True)
class ConditionExpression:
    """Terms and the logical operators between them.

    ``operators[i]`` joins ``conditions[i]`` and ``conditions[i + 1]``.
    """

    conditions: Tuple[ConditionTerm, ...]
    operators: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.conditions:
            raise ValueError("A condition expression needs at least one term")
        if len(self.operators) != len(self.conditions) - 1:
            raise ValueError(
                f"Expected {len(self.conditions) - 1} logical operators, got {len(self.operators)}"
            )
        for op in self.operators:
            if op not in LOGICAL_OPERATORS:
                raise ValueError(f"Unsupported logical operator: {op}")

    def __str__(self) -> str:
        parts = [str(self.conditions[0])]
        for op, term in zip(self.operators, self.conditions[1:]):
            parts.append(op)
            parts.append(str(term))
        return " ".join(parts)


__all__ = [
    "PACKAGE_ECOSYSTEMS",
    "PATH_NAMESPACES",
    "VALUE_NAMESPACES",
    "VALID_NAMESPACES",
    "COMPARISON_OPERATORS",
    "LOGICAL_OPERATORS",
    "ComparisonOperator",
    "LogicalOperator",
    "Identifier",
    "ConditionTerm",
    "ConditionExpression",
]
