"""Scheduling expression utilities.

Turns structured field inputs (a number, a list of numbers, ``{"every": n}``,
``{"from": a, "to": b}``, ``{"from": a, "to": b, "every": n}`` or a
month/weekday name) into compiled field patterns, and provides the
:class:`Pattern` builder that bundles six fields with a timezone.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .clock import get_zone, time_parts, validate_timezone
from .engine import SchedulerEngine, get_default_engine
from .exceptions import DomainRangeError, PatternSyntaxError, UnknownSymbolError
from .matcher import WILDCARD, AnyOf, Exact, FieldPattern, Span, Step, Wildcard, parse_pattern

if TYPE_CHECKING:
    from ..core.config import FieldInput, ScheduleConfig


class Month(str, Enum):
    JANUARY = "jan"
    FEBRUARY = "feb"
    MARCH = "mar"
    APRIL = "apr"
    MAY = "may"
    JUNE = "jun"
    JULY = "jul"
    AUGUST = "aug"
    SEPTEMBER = "sep"
    OCTOBER = "oct"
    NOVEMBER = "nov"
    DECEMBER = "dec"


class DayOfWeek(str, Enum):
    SUNDAY = "sun"
    MONDAY = "mon"
    TUESDAY = "tue"
    WEDNESDAY = "wed"
    THURSDAY = "thu"
    FRIDAY = "fri"
    SATURDAY = "sat"


@dataclass(frozen=True)
class CronField:
    name: str
    min_value: int
    max_value: int
    aliases: Mapping[str, int] = field(default_factory=dict)


CRON_FIELDS: dict[str, CronField] = {
    f.name: f
    for f in (
        CronField("second", 0, 59),
        CronField("minute", 0, 59),
        CronField("hour", 0, 23),
        CronField("day", 1, 31),
        CronField("month", 1, 12, {m.value: i for i, m in enumerate(Month, start=1)}),
        CronField("weekday", 0, 6, {d.value: i for i, d in enumerate(DayOfWeek)}),
    )
}

FIELD_NAMES = tuple(CRON_FIELDS)

DEFAULT_TIMEZONE = "UTC"

_CRON_RE = re.compile(r"^\s*(?P<fields>[^\[\]]*?)\s*(?:\[(?P<tz>[^\[\]]*)\])?\s*$")


def get_field(name: str) -> CronField:
    """Look up a field definition.

    Raises:
        UnknownSymbolError: If ``name`` is not one of the six fields
    """
    try:
        return CRON_FIELDS[name]
    except KeyError:
        raise UnknownSymbolError(str(name)) from None


def _check_value(value: Any, field_def: CronField) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{field_def.name} value must be an integer, got {value!r}")
    if not field_def.min_value <= value <= field_def.max_value:
        raise DomainRangeError(
            f"{field_def.name} value {value} is out of range "
            f"[{field_def.min_value}, {field_def.max_value}]",
            field=field_def.name,
        )
    return value


def _check_step(every: Any, field_def: CronField, upper: int | None = None) -> int:
    if isinstance(every, bool) or not isinstance(every, int):
        raise TypeError(f"{field_def.name}: 'every' must be an integer, got {every!r}")
    if upper is not None and not 1 <= every <= upper:
        raise DomainRangeError(
            f"{field_def.name}: 'every' step {every} is out of range [1, {upper}]",
            field=field_def.name,
        )
    if every < 1:
        raise DomainRangeError(f"{field_def.name}: 'every' step must be >= 1", field=field_def.name)
    return every


def _check_bounds(start: int, end: int, field_def: CronField) -> None:
    _check_value(start, field_def)
    _check_value(end, field_def)
    if start > end:
        raise DomainRangeError(
            f"{field_def.name}: 'from' ({start}) must be <= 'to' ({end})", field=field_def.name
        )


def resolve_symbol(name: str, field_name: str) -> int:
    """Resolve a month or weekday name (case-insensitive) for ``field_name``."""
    field_def = get_field(field_name)
    key = name.value if isinstance(name, Enum) else name.strip().lower()
    if key not in field_def.aliases:
        raise UnknownSymbolError(key, field=field_name)
    return field_def.aliases[key]


def compile_field(value: FieldInput | Enum, field_name: str) -> FieldPattern:
    """Validate a structured input and compile it for ``field_name``.

    Args:
        value: A number, list of numbers, step/range mapping or symbolic name
        field_name: One of ``second``, ``minute``, ``hour``, ``day``,
            ``month`` or ``weekday``

    Returns:
        The compiled FieldPattern

    Raises:
        DomainRangeError: If a value, bound or step is out of range
        UnknownSymbolError: If the field or the symbolic name is unknown
        TypeError: If the input has none of the accepted shapes
    """
    field_def = get_field(field_name)

    if isinstance(value, str):
        return Exact(resolve_symbol(value, field_name))

    if isinstance(value, int) and not isinstance(value, bool):
        return Exact(_check_value(value, field_def))

    if isinstance(value, (list, tuple)):
        if not value:
            raise DomainRangeError(f"{field_name}: list needs at least one value", field=field_name)
        items = tuple(Exact(_check_value(v, field_def)) for v in value)
        # A one-item list is the same schedule as the bare value.
        return items[0] if len(items) == 1 else AnyOf(items)

    if isinstance(value, Mapping):
        keys = set(value)
        if keys == {"every"}:
            span = field_def.max_value - field_def.min_value
            return Step(_check_step(value["every"], field_def, upper=span))
        if keys in ({"from", "to"}, {"from", "to", "every"}):
            start, end = value["from"], value["to"]
            _check_bounds(start, end, field_def)
            if "every" in keys:
                return Step(_check_step(value["every"], field_def), start, end)
            return Span(start, end)
        raise TypeError(f"{field_name}: unsupported keys {sorted(keys)}")

    raise TypeError(f"{field_name}: unsupported input {value!r}")


def validate_pattern(pattern: FieldPattern, field_name: str) -> FieldPattern:
    """Check a parsed pattern against the domain of ``field_name``."""
    field_def = get_field(field_name)
    if isinstance(pattern, Wildcard):
        pass
    elif isinstance(pattern, Exact):
        _check_value(pattern.value, field_def)
    elif isinstance(pattern, Span):
        _check_bounds(pattern.start, pattern.end, field_def)
    elif isinstance(pattern, Step):
        if pattern.start is None:
            _check_step(pattern.step, field_def, upper=field_def.max_value - field_def.min_value)
        else:
            end = pattern.start if pattern.end is None else pattern.end
            _check_bounds(pattern.start, end, field_def)
            _check_step(pattern.step, field_def)
    elif isinstance(pattern, AnyOf):
        for item in pattern.items:
            validate_pattern(item, field_name)
    else:
        raise TypeError(f"Unsupported pattern type: {type(pattern).__name__}")
    return pattern


class Pattern:
    """Six field patterns plus a timezone.

    Every setter returns a new Pattern; the receiver is left untouched, so a
    Pattern can be shared freely, including with running registrations.

    Example:
        ```python
        from cronwhen import when

        stop = when().sec(0).min({"every": 5}).tz("Europe/Berlin").do(tick)
        ...
        stop()
        ```
    """

    __slots__ = ("_fields", "_timezone", "_zone")

    def __init__(
        self,
        fields: Mapping[str, FieldPattern] | None = None,
        timezone: str = DEFAULT_TIMEZONE,
    ) -> None:
        compiled = dict.fromkeys(FIELD_NAMES, WILDCARD)
        for name, pattern in (fields or {}).items():
            get_field(name)
            if not isinstance(pattern, FieldPattern):
                raise TypeError(f"{name}: expected a FieldPattern, got {pattern!r}")
            compiled[name] = pattern
        self._fields: dict[str, FieldPattern] = compiled
        self._zone = get_zone(timezone)
        self._timezone = timezone

    def with_field(self, field_name: str, value: FieldInput | Enum) -> Pattern:
        """Return a copy with ``field_name`` compiled from ``value``."""
        fields = dict(self._fields)
        fields[field_name] = compile_field(value, field_name)
        return Pattern(fields, self._timezone)

    def sec(self, value: FieldInput) -> Pattern:
        return self.with_field("second", value)

    def min(self, value: FieldInput) -> Pattern:
        return self.with_field("minute", value)

    def hour(self, value: FieldInput) -> Pattern:
        return self.with_field("hour", value)

    def date(self, value: FieldInput) -> Pattern:
        return self.with_field("day", value)

    def month(self, value: FieldInput | Month) -> Pattern:
        return self.with_field("month", value)

    def week(self, value: FieldInput | DayOfWeek) -> Pattern:
        return self.with_field("weekday", value)

    def tz(self, timezone: str) -> Pattern:
        """Return a copy evaluated in ``timezone``.

        Raises:
            DomainRangeError: If the timezone database does not know it
        """
        return Pattern(self._fields, validate_timezone(timezone))

    @property
    def fields(self) -> Mapping[str, FieldPattern]:
        return MappingProxyType(self._fields)

    @property
    def timezone(self) -> str:
        return self._timezone

    @property
    def cron(self) -> str:
        """Serialized form: ``<s> <m> <h> <d> <M> <w> [<timezone>]``."""
        body = " ".join(str(self._fields[name]) for name in FIELD_NAMES)
        return f"{body} [{self._timezone}]"

    def matches(self, instant: datetime) -> bool:
        """Return True when every field matches ``instant`` in this timezone."""
        parts = time_parts(instant, self._zone)
        return all(self._fields[name].matches(getattr(parts, name)) for name in FIELD_NAMES)

    def do(
        self, fn: Callable[[], Any], engine: SchedulerEngine | None = None
    ) -> Callable[[], None]:
        """Run ``fn`` once for every matching second.

        Args:
            fn: Zero-argument callback
            engine: Engine to register with; defaults to the shared engine

        Returns:
            A zero-argument function that cancels the registration
        """
        if engine is None:
            engine = get_default_engine()
        registration = engine.start(self, fn)
        return registration.cancel

    @classmethod
    def from_cron(cls, text: str, default_timezone: str = DEFAULT_TIMEZONE) -> Pattern:
        """Parse the serialized form produced by :attr:`cron`.

        The bracketed timezone may be omitted, in which case
        ``default_timezone`` is used.

        Raises:
            PatternSyntaxError: If the text does not have six valid fields
            DomainRangeError: If a field or the timezone is out of range
        """
        match = _CRON_RE.match(text) if isinstance(text, str) else None
        if match is None:
            raise PatternSyntaxError(str(text), "expected '<s> <m> <h> <d> <M> <w> [tz]'")
        parts = match.group("fields").split()
        if len(parts) != len(FIELD_NAMES):
            raise PatternSyntaxError(text, f"expected 6 fields, got {len(parts)}")
        fields = {
            name: validate_pattern(parse_pattern(part), name)
            for name, part in zip(FIELD_NAMES, parts, strict=True)
        }
        timezone = match.group("tz")
        if timezone is None:
            timezone = default_timezone
        return cls(fields, validate_timezone(timezone.strip()))

    @classmethod
    def from_config(cls, config: ScheduleConfig) -> Pattern:
        if config.cron is not None:
            return cls.from_cron(config.cron, default_timezone=config.timezone)
        pattern = cls(timezone=config.timezone)
        for name, value in config.field_inputs().items():
            if value is not None:
                pattern = pattern.with_field(name, value)
        return pattern

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pattern):
            return NotImplemented
        return self._fields == other._fields and self._timezone == other._timezone

    def __hash__(self) -> int:
        return hash((tuple(self._fields[name] for name in FIELD_NAMES), self._timezone))

    def __repr__(self) -> str:
        return f"Pattern({self.cron!r})"

    def __str__(self) -> str:
        return self.cron


def when() -> Pattern:
    """Start a new pattern: every second, in UTC."""
    return Pattern()


__all__ = [
    "CRON_FIELDS",
    "FIELD_NAMES",
    "CronField",
    "DayOfWeek",
    "Month",
    "Pattern",
    "compile_field",
    "get_field",
    "resolve_symbol",
    "validate_pattern",
    "when",
]
