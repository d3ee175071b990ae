"""cron-when: cron-style field patterns and a once-per-second scheduler.

Example:
    ```python
    from cronwhen import when

    # Every weekday at 09:30:00 Berlin time
    stop = (
        when()
        .sec(0)
        .min(30)
        .hour(9)
        .week({"from": 1, "to": 5})
        .tz("Europe/Berlin")
        .do(lambda: print("stand-up"))
    )

    # Later
    stop()
    ```
"""

from importlib.metadata import PackageNotFoundError, version

from .core import CronWhenConfig, get_logger, setup_logging
from .scheduler import (
    DayOfWeek,
    DomainRangeError,
    ManualClock,
    Month,
    Pattern,
    PatternSyntaxError,
    Registration,
    SchedulerEngine,
    SystemClock,
    UnknownSymbolError,
    is_match,
    parse_pattern,
    when,
)

__all__ = [
    "__version__",
    "when",
    "Pattern",
    "is_match",
    "parse_pattern",
    "Month",
    "DayOfWeek",
    "SchedulerEngine",
    "Registration",
    "ManualClock",
    "SystemClock",
    "DomainRangeError",
    "PatternSyntaxError",
    "UnknownSymbolError",
    "CronWhenConfig",
    "get_logger",
    "setup_logging",
]

try:  # pragma: no cover - best-effort during development
    __version__ = version("cron-when")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
