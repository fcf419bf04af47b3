"""ai-sync render command.

SUMMARY: Compose a rule document and print the body for each target.

Resolves `@include` directives, evaluates the frontmatter `when:` condition
against the project, and renders `{{#target}}` blocks per platform.
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from ai_sync.cli import (
    OutputFormatter,
    add_standard_flags,
    add_target_flag,
    get_repo_root,
    load_config,
)
from ai_sync.core.composition import DocumentPipeline
from ai_sync.core.exceptions import ConfigError, DocumentError

SUMMARY = "Compose a rule document and render it for each target"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="Path to the markdown document")
    add_target_flag(parser)
    parser.add_argument(
        "--preserve-whitespace",
        action="store_true",
        help="Keep whitespace exactly as left by removed blocks",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        config = load_config(args)
    except ConfigError as e:
        formatter.error(e, error_code="config_error")
        return 1
    if args.preserve_whitespace:
        config["composition"]["preserve_whitespace"] = True

    pipeline = DocumentPipeline.from_config(config, get_repo_root(args), targets=args.targets)
    try:
        doc = asyncio.run(pipeline.compose(Path(args.path)))
    except DocumentError as e:
        formatter.error(e, error_code="document_error")
        return 1

    if formatter.json_mode:
        formatter.json_output(
            {
                "path": doc.path,
                "included": doc.included,
                "reason": doc.reason,
                "includedFiles": doc.included_files,
                "bodies": doc.bodies,
            }
        )
        return 0

    if not doc.included:
        formatter.text(f"Skipped {doc.path}: {doc.reason}")
        return 0
    for target, body in doc.bodies.items():
        formatter.text(f"===== {target} =====")
        formatter.text(body.rstrip("\n"))
    return 0
