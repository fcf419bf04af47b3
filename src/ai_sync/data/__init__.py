"""
ai-sync data resource helpers.

Provides access to the bundled default configuration and schemas using
importlib.resources.
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """
    Get absolute path to a data file or directory.

    Example:
        >>> get_data_path("config", "defaults.yaml")
        PosixPath('/path/to/ai_sync/data/config/defaults.yaml')
    """
    pkg = resources.files("ai_sync.data")
    base = Path(str(pkg / subpackage))
    return base / filename if filename else base


@lru_cache(maxsize=16)
def read_yaml(subpackage: str, filename: str) -> dict[str, Any]:
    """Read and parse a bundled YAML file (cached)."""
    path = get_data_path(subpackage, filename)
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


@lru_cache(maxsize=16)
def read_json(subpackage: str, filename: str) -> dict[str, Any]:
    """Read and parse a bundled JSON file (cached)."""
    path = get_data_path(subpackage, filename)
    return json.loads(path.read_text(encoding="utf-8"))


__all__ = ["get_data_path", "read_yaml", "read_json"]
