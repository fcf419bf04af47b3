"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse

from ai_sync.core.targets import DEFAULT_TARGETS


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_repo_root_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repo-root",
        type=str,
        help="Override repository root path",
    )


def add_target_flag(parser: argparse.ArgumentParser) -> None:
    """Add a repeatable --target flag restricted to the known platforms."""
    parser.add_argument(
        "--target",
        "-t",
        action="append",
        dest="targets",
        choices=list(DEFAULT_TARGETS),
        help="Target platform to render (repeatable; default: configured targets)",
    )


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    """Add the flags every command takes (--json, --repo-root)."""
    add_json_flag(parser)
    add_repo_root_flag(parser)


__all__ = [
    "add_json_flag",
    "add_repo_root_flag",
    "add_target_flag",
    "add_standard_flags",
]
