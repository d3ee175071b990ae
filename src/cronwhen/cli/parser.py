"""CLI argument parser."""

from __future__ import annotations

import argparse

from .. import __version__


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Returns:
        ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="cron-when",
        description="Cron-style field patterns and a once-per-second scheduler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Does minute 15 match a field pattern?
  cron-when check "0,15,30,45" 15

  # Does a full pattern match right now, or at a given instant?
  cron-when match "45 30 9 * * * [UTC]" --at 2024-06-15T09:30:45Z

  # Generate a config file, list its schedules, then run them for a minute
  cron-when init -o schedules.yaml
  cron-when show -c schedules.yaml
  cron-when run -c schedules.yaml --duration 60
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s v{__version__}",
        help="Show program's version number and exit",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    check_parser = subparsers.add_parser("check", help="Match values against a field pattern")
    check_parser.add_argument("pattern", help='Field pattern, e.g. "*/5" or "1-10/2"')
    check_parser.add_argument("values", nargs="+", type=int, help="Field values to test")

    match_parser = subparsers.add_parser("match", help="Evaluate a full pattern at an instant")
    match_parser.add_argument("cron", help='Pattern string, e.g. "0 */5 * * * * [UTC]"')
    match_parser.add_argument(
        "--at",
        default=None,
        help="ISO 8601 instant to evaluate (default: now; naive values are read as UTC)",
    )

    show_parser = subparsers.add_parser("show", help="List the schedules in a config file")
    show_parser.add_argument(
        "-c",
        "--config",
        default="schedules.yaml",
        help="Path to configuration file (default: schedules.yaml)",
    )

    run_parser = subparsers.add_parser("run", help="Run the schedules in a config file")
    run_parser.add_argument(
        "-c",
        "--config",
        default="schedules.yaml",
        help="Path to configuration file (default: schedules.yaml)",
    )
    run_parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (default: run until interrupted)",
    )
    run_parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug/verbose logging mode",
    )

    init_parser = subparsers.add_parser("init", help="Generate an example configuration")
    init_parser.add_argument(
        "-o",
        "--output",
        default="schedules.yaml",
        help="Output config file path (default: schedules.yaml)",
    )
    init_parser.add_argument(
        "-f", "--force", action="store_true", help="Overwrite an existing file"
    )

    return parser
