"""Logging utilities for cron-when.

Console output goes through rich; a rotating log file can be added from
:class:`LoggingConfig`. Application loggers live under the ``cronwhen.``
namespace. APScheduler's own loggers are kept at WARNING or above because the
engine ticks every second and would otherwise log each run.
"""

from __future__ import annotations

import logging
from contextlib import suppress
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from .config import LoggingConfig

ROOT_NAMESPACE = "cronwhen"
APSCHEDULER_NAMESPACE = "apscheduler"

_loggers: dict[str, logging.Logger] = {}
_current_level: int = logging.INFO

console = Console(stderr=True)


def _clear_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        with suppress(Exception):
            handler.flush()
        with suppress(Exception):
            handler.close()
    logger.handlers.clear()


def _file_handler(config: LoggingConfig, level: int) -> RotatingFileHandler:
    log_path = Path(config.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
        delay=True,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(config.format))
    return handler


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure console and file logging for the whole process.

    Existing root handlers are closed and replaced, so calling this again
    with a different config is safe.

    Args:
        config: LoggingConfig instance. If None, uses defaults.
    """
    global _current_level

    config = config or LoggingConfig()
    level = getattr(logging, config.level)

    root_logger = logging.getLogger()
    _clear_handlers(root_logger)
    root_logger.setLevel(level)

    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)
    if config.log_file:
        root_logger.addHandler(_file_handler(config, level))

    logging.getLogger(ROOT_NAMESPACE).setLevel(level)
    logging.getLogger(APSCHEDULER_NAMESPACE).setLevel(max(level, logging.WARNING))

    _current_level = level
    for named in _loggers.values():
        named.setLevel(level)

    get_logger("setup").debug(
        f"Logging configured: level={config.level}, file={config.log_file or '-'}"
    )


def get_logger(name: str) -> logging.Logger:
    """Return the ``cronwhen.<name>`` logger, at the configured level."""
    if name not in _loggers:
        logger = logging.getLogger(f"{ROOT_NAMESPACE}.{name}")
        logger.setLevel(_current_level)
        _loggers[name] = logger
    return _loggers[name]


def log_exception(logger: logging.Logger, exc: BaseException, context: str = "") -> None:
    """Log ``exc`` at error level with its own traceback.

    Works outside of an ``except`` block, e.g. for exceptions handed over by
    scheduler events.
    """
    message = f"{context}: {exc}" if context else f"Exception occurred: {exc}"
    logger.error(message, exc_info=(type(exc), exc, exc.__traceback__))
