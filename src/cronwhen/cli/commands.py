"""CLI command handlers: check, match, show, run, init."""

from __future__ import annotations

import argparse
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..core import CronWhenConfig, ScheduleConfig, get_logger, setup_logging
from ..scheduler import (
    FIELD_NAMES,
    DomainRangeError,
    Pattern,
    PatternSyntaxError,
    SchedulerEngine,
    is_match,
    parse_pattern,
    time_parts,
)

logger = get_logger("cli")

EXAMPLE_CONFIG = """\
# cron-when schedules
logging:
  level: INFO
  log_file: null

engine:
  tick_interval: 1.0
  max_workers: 10

schedules:
  - name: every-ten-seconds
    second: {every: 10}
    message: "Ten more seconds went by"

  - name: weekday-standup
    second: 0
    minute: 30
    hour: 9
    weekday: {from: 1, to: 5}
    timezone: Europe/Berlin
    message: "Stand-up time"

  - name: quarter-hours
    cron: "0 0,15,30,45 * * * * [UTC]"
"""


def _parse_instant(text: str | None) -> datetime:
    if text is None:
        return datetime.now(timezone.utc)
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    instant = datetime.fromisoformat(text)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


def _load_config(path: Path) -> CronWhenConfig | None:
    if not path.exists():
        print(f"Config file not found: {path}")
        return None
    try:
        return CronWhenConfig.load(path)
    except (ValueError, TypeError) as e:
        logger.error(f"Error loading config {path}: {e}")
        print(f"Error: {e}")
        return None


def cmd_check(args: argparse.Namespace) -> int:
    """Handle check command.

    Returns:
        0 if every value matches, 1 otherwise
    """
    try:
        pattern = parse_pattern(args.pattern)
    except PatternSyntaxError as e:
        print(f"Error: {e}")
        return 1

    console = Console()
    table = Table(title=f"Pattern {pattern}")
    table.add_column("Value", style="cyan", justify="right")
    table.add_column("Match")

    results = [is_match(value, pattern) for value in args.values]
    for value, matched in zip(args.values, results, strict=True):
        table.add_row(str(value), "[green]yes[/]" if matched else "[red]no[/]")

    console.print(table)
    return 0 if all(results) else 1


def cmd_match(args: argparse.Namespace) -> int:
    """Handle match command.

    Returns:
        0 if the pattern matches the instant, 1 if not or on error
    """
    try:
        pattern = Pattern.from_cron(args.cron)
        instant = _parse_instant(args.at)
    except (PatternSyntaxError, DomainRangeError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    parts = time_parts(instant, pattern.timezone)
    console = Console()
    table = Table(title=f"{pattern.cron} at {instant.isoformat()}")
    table.add_column("Field", style="cyan")
    table.add_column("Pattern")
    table.add_column("Local value", justify="right")
    table.add_column("Match")
    for name in FIELD_NAMES:
        field_pattern = pattern.fields[name]
        value = getattr(parts, name)
        matched = field_pattern.matches(value)
        table.add_row(name, str(field_pattern), str(value), "yes" if matched else "no")
    console.print(table)

    matched = pattern.matches(instant)
    console.print("[green]MATCH[/]" if matched else "[yellow]NO MATCH[/]")
    return 0 if matched else 1


def cmd_show(args: argparse.Namespace) -> int:
    """Handle show command."""
    config = _load_config(Path(args.config))
    if config is None:
        return 1

    console = Console()
    if not config.schedules:
        console.print("[yellow]No schedules configured.[/]")
        return 0

    table = Table(title="Schedules")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Pattern", no_wrap=True)
    table.add_column("Enabled")
    table.add_column("Message")
    for schedule in config.schedules:
        table.add_row(
            schedule.name,
            schedule.to_pattern().cron,
            "yes" if schedule.enabled else "no",
            schedule.message or "",
        )
    console.print(table)
    return 0


def _make_callback(schedule: ScheduleConfig) -> Callable[[], None]:
    schedule_logger = get_logger(f"schedule.{schedule.name}")
    message = schedule.message or f"Schedule '{schedule.name}' fired"

    def fire() -> None:
        schedule_logger.info(message)

    return fire


def cmd_run(args: argparse.Namespace) -> int:
    """Handle run command: register every enabled schedule and wait."""
    config = _load_config(Path(args.config))
    if config is None:
        return 1

    if args.debug:
        config.logging.level = "DEBUG"
    setup_logging(config.logging)

    schedules = config.enabled_schedules()
    if not schedules:
        Console().print("[yellow]No enabled schedules.[/]")
        return 0

    stop = threading.Event()
    engine = SchedulerEngine(config.engine)
    try:
        for schedule in schedules:
            engine.start(schedule.to_pattern(), _make_callback(schedule))
        logger.info(f"Running {len(schedules)} schedule(s)")
        stop.wait(args.duration)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        engine.shutdown()
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """Handle init command."""
    output = Path(args.output)
    if output.exists() and not args.force:
        print(f"File already exists: {output} (use --force to overwrite)")
        return 1
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(EXAMPLE_CONFIG, encoding="utf-8")
    print(f"Configuration written to {output}")
    return 0


__all__ = ["EXAMPLE_CONFIG", "cmd_check", "cmd_init", "cmd_match", "cmd_run", "cmd_show"]
