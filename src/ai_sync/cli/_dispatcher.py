"""
Auto-discovery CLI dispatcher for ai-sync.

Scans ``cli/commands`` and registers every public module as a subcommand.
Adding a new command = adding a .py file with SUMMARY/register_args/main.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any

from ai_sync.cli._utils import configure_logging


@lru_cache(maxsize=1)
def discover_commands() -> dict[str, dict[str, Any]]:
    """Discover commands under cli/commands.

    Returns:
        Dict mapping command name to command info dict
    """
    commands_dir = Path(__file__).parent / "commands"
    commands: dict[str, dict[str, Any]] = {}

    for item in sorted(commands_dir.glob("*.py")):
        if item.name.startswith("_"):
            continue
        cmd_name = item.stem
        try:
            module = importlib.import_module(f"ai_sync.cli.commands.{cmd_name}")
        except ImportError as e:
            print(f"Warning: Could not import command {cmd_name}: {e}", file=sys.stderr)
            continue
        commands[cmd_name] = {
            "module": module,
            "summary": getattr(module, "SUMMARY", cmd_name),
            "register_args": getattr(module, "register_args", None),
            "main": getattr(module, "main", None),
        }
    return commands


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with auto-discovered commands."""
    parser = argparse.ArgumentParser(
        prog="ai-sync",
        description="ai-sync - compose AI tool rules for Cursor, Claude and Factory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging (sent to stderr)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )
    for cmd_name, cmd_info in discover_commands().items():
        primary_name = cmd_name.replace("_", "-")
        aliases = [cmd_name] if primary_name != cmd_name else []
        cmd_parser = subparsers.add_parser(primary_name, aliases=aliases, help=cmd_info["summary"])
        if cmd_info["register_args"]:
            cmd_info["register_args"](cmd_parser)
        if cmd_info["main"]:
            cmd_parser.set_defaults(_func=cmd_info["main"])

    return parser


def _get_version() -> str:
    from ai_sync import __version__

    return __version__


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the ai-sync CLI.

    Returns:
        Exit code (0 success, 1 command failure, 2 usage error)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return int(e.code) if isinstance(e.code, int) else 2

    if not getattr(args, "_func", None):
        parser.print_help()
        return 0

    configure_logging(getattr(args, "verbose", False))
    return int(args._func(args))


if __name__ == "__main__":
    sys.exit(main())
