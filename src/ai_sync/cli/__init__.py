"""
ai-sync CLI package.

Commands are auto-discovered from ``cli/commands/*.py``; each module exposes
``SUMMARY``, ``register_args(parser)`` and ``main(args) -> int``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Repo root detection, config loading, logging setup
"""
from ._output import OutputFormatter
from ._args import add_json_flag, add_repo_root_flag, add_standard_flags, add_target_flag
from ._utils import configure_logging, get_repo_root, load_config

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "add_json_flag",
    "add_repo_root_flag",
    "add_standard_flags",
    "add_target_flag",
    # Utilities
    "configure_logging",
    "get_repo_root",
    "load_config",
]
