"""ai-sync deps command.

SUMMARY: List the files a document pulls in through `@include`.
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from ai_sync.cli import OutputFormatter, add_standard_flags, get_repo_root, load_config
from ai_sync.core.composition import IncludeResolver
from ai_sync.core.exceptions import ConfigError
from ai_sync.core.utils.fs import read_text

SUMMARY = "List files included by a document (in splice order)"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="Path to the markdown document")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    path = Path(args.path)

    try:
        config = load_config(args)
    except ConfigError as e:
        formatter.error(e, error_code="config_error")
        return 1

    try:
        content = asyncio.run(read_text(path))
    except (OSError, UnicodeDecodeError) as e:
        formatter.error(f"Cannot read {path}: {e}", error_code="not_found")
        return 1

    resolver = IncludeResolver(max_depth=int(config["composition"]["max_include_depth"]))
    resolution = asyncio.run(resolver.resolve(content, path, base_dir=path.parent))
    if resolution.error is not None:
        formatter.error(resolution.error, error_code=resolution.error.code.lower())
        return 1

    repo_root = get_repo_root(args)
    rel = [_display(p, repo_root) for p in resolution.included_files]
    formatter.success(
        {"path": str(path), "includedFiles": rel},
        "\n".join(rel) if rel else f"No includes in {path}",
    )
    return 0


def _display(path: str, repo_root: Path) -> str:
    try:
        return str(Path(path).resolve().relative_to(repo_root))
    except ValueError:
        return path
