"""ai-sync check command.

SUMMARY: Evaluate a `when:` expression against the current project.

Exit codes: 0 when the expression was evaluated (whether or not it holds),
1 when it cannot be parsed or a manifest cannot be read.
"""

from __future__ import annotations

import argparse
import asyncio

from ai_sync.cli import OutputFormatter, add_standard_flags, get_repo_root, load_config
from ai_sync.core.conditions import build_project_context, evaluate_condition_expression
from ai_sync.core.exceptions import ConfigError

SUMMARY = "Evaluate a condition expression (e.g. 'npm:react && !file:.env')"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("expression", help="Condition expression to evaluate")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        config = load_config(args)
    except ConfigError as e:
        formatter.error(e, error_code="config_error")
        return 1

    context = build_project_context(get_repo_root(args), config.get("variables") or {})
    result = asyncio.run(evaluate_condition_expression(args.expression, context))

    if result.error is not None:
        formatter.error(result.error, error_code=result.error.code.lower())
        return 1

    formatter.success(
        {
            "expression": args.expression,
            "matches": result.matches,
            "reason": result.reason,
            "checkedIdentifiers": list(result.checked_identifiers),
        },
        f"{'MATCH' if result.matches else 'NO MATCH'}: {args.expression}",
    )
    if not formatter.json_mode:
        formatter.text_kv("reason", result.reason)
        formatter.text_kv("checked", ", ".join(result.checked_identifiers))
    return 0
