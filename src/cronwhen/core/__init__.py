"""Core modules for cron-when.

This package contains:
- Configuration management
- Logging utilities
"""

from .config import CronWhenConfig, EngineConfig, LoggingConfig, ScheduleConfig
from .logger import get_logger, log_exception, setup_logging

__all__ = [
    "CronWhenConfig",
    "EngineConfig",
    "LoggingConfig",
    "ScheduleConfig",
    "get_logger",
    "log_exception",
    "setup_logging",
]
