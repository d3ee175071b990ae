"""Command-line interface for cron-when."""

from __future__ import annotations

from collections.abc import Sequence

from .commands import cmd_check, cmd_init, cmd_match, cmd_run, cmd_show
from .parser import build_parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv: Optional sequence of CLI arguments (without the program name).

    Returns:
        Process exit code. 0 for success.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        raise SystemExit(0)

    handlers = {
        "check": cmd_check,
        "match": cmd_match,
        "show": cmd_show,
        "run": cmd_run,
        "init": cmd_init,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


__all__ = [
    "build_parser",
    "cmd_check",
    "cmd_init",
    "cmd_match",
    "cmd_run",
    "cmd_show",
    "main",
]
