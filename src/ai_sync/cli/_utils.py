"""Shared CLI utilities."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict

from ai_sync.core.config import ConfigManager, find_repo_root


def get_repo_root(args: argparse.Namespace) -> Path:
    """Get repository root from --repo-root or auto-detect."""
    if getattr(args, "repo_root", None):
        return Path(args.repo_root).resolve()
    return find_repo_root()


def load_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Load the merged, validated configuration for the selected repository."""
    return ConfigManager(get_repo_root(args)).load_config(validate=True)


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for CLI runs (library code never does this)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


__all__ = ["get_repo_root", "load_config", "configure_logging"]
