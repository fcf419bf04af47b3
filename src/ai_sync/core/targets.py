"""Target platforms that documents are rendered for."""
from __future__ import annotations

from typing import Any, List, Literal, Tuple

TargetType = Literal["cursor", "claude", "factory"]

DEFAULT_TARGETS: Tuple[str, ...] = ("cursor", "claude", "factory")


def is_valid_target(value: Any) -> bool:
    """Return True if ``value`` names a known target platform."""
    return isinstance(value, str) and value in DEFAULT_TARGETS


def normalize_targets(values: Any) -> List[str]:
    """Validate a configured target list, preserving order and dropping duplicates.

    Raises:
        ValueError: If ``values`` is not a list or names an unknown target.
    """
    if values is None:
        return list(DEFAULT_TARGETS)
    if not isinstance(values, (list, tuple)):
        raise ValueError(f"Targets must be a list, got {type(values).__name__}")
    result: List[str] = []
    for value in values:
        if not is_valid_target(value):
            raise ValueError(
                f"Unknown target: {value!r}. Valid targets: {', '.join(DEFAULT_TARGETS)}"
            )
        if value not in result:
            result.append(value)
    return result


__all__ = ["TargetType", "DEFAULT_TARGETS", "is_valid_target", "normalize_targets"]
