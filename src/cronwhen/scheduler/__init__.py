"""Scheduler module: field patterns, pattern builder and tick engine.

This package provides:
- The field pattern grammar and matcher
- Compilation of structured field inputs with domain validation
- The immutable Pattern builder
- An APScheduler-based engine that fires callbacks once per matching second
"""

from .clock import Clock, ManualClock, SystemClock, TimeParts, time_parts, validate_timezone
from .engine import (
    Registration,
    RegistrationState,
    SchedulerEngine,
    get_default_engine,
    shutdown_default_engine,
)
from .exceptions import DomainRangeError, PatternSyntaxError, UnknownSymbolError
from .expressions import (
    CRON_FIELDS,
    FIELD_NAMES,
    CronField,
    DayOfWeek,
    Month,
    Pattern,
    compile_field,
    validate_pattern,
    when,
)
from .matcher import AnyOf, Exact, FieldPattern, Span, Step, Wildcard, is_match, parse_pattern

__all__ = [
    # Matcher
    "AnyOf",
    "Exact",
    "FieldPattern",
    "Span",
    "Step",
    "Wildcard",
    "is_match",
    "parse_pattern",
    # Expressions
    "CRON_FIELDS",
    "FIELD_NAMES",
    "CronField",
    "DayOfWeek",
    "Month",
    "Pattern",
    "compile_field",
    "validate_pattern",
    "when",
    # Clock
    "Clock",
    "ManualClock",
    "SystemClock",
    "TimeParts",
    "time_parts",
    "validate_timezone",
    # Engine
    "Registration",
    "RegistrationState",
    "SchedulerEngine",
    "get_default_engine",
    "shutdown_default_engine",
    # Errors
    "DomainRangeError",
    "PatternSyntaxError",
    "UnknownSymbolError",
]
