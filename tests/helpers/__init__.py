"""Test helper modules for the ai-sync test suite.

- io_utils: writing text, JSON and YAML fixture files
"""
from __future__ import annotations

from helpers.io_utils import write_json, write_text, write_yaml

__all__ = ["write_json", "write_text", "write_yaml"]
