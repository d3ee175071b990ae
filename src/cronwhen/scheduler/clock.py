"""Clock capability and timezone-local time parts."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import DomainRangeError


class Clock(Protocol):
    """Source of the current instant. ``now`` must return an aware datetime."""

    def now(self) -> datetime: ...


class SystemClock:
    """Reads the host's real-time clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock:
    """A clock that only moves when told to.

    Example:
        ```python
        clock = ManualClock(datetime(2024, 6, 15, 9, 30, 45, tzinfo=timezone.utc))
        clock.advance(1)
        ```
    """

    def __init__(self, start: datetime | None = None) -> None:
        if start is None:
            start = datetime.now(timezone.utc)
        self._now = _ensure_aware(start)
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def set(self, instant: datetime) -> None:
        with self._lock:
            self._now = _ensure_aware(instant)

    def advance(self, seconds: float) -> datetime:
        with self._lock:
            self._now = self._now + timedelta(seconds=seconds)
            return self._now


def _ensure_aware(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        raise ValueError("Clock instants must be timezone-aware")
    return instant


class TimeParts(NamedTuple):
    """Calendar/time fields of an instant in one timezone.

    ``weekday`` counts from Sunday (0) to Saturday (6).
    """

    second: int
    minute: int
    hour: int
    day: int
    month: int
    weekday: int


def get_zone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone identifier.

    Raises:
        DomainRangeError: If the host timezone database does not know ``name``
    """
    if not isinstance(name, str) or not name:
        raise DomainRangeError(f'Unknown timezone: "{name}"', field="timezone")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise DomainRangeError(f'Unknown timezone: "{name}"', field="timezone") from exc


def validate_timezone(name: str) -> str:
    get_zone(name)
    return name


def time_parts(instant: datetime, tz: str | ZoneInfo) -> TimeParts:
    """Project ``instant`` into ``tz`` and split it into calendar fields."""
    zone = tz if isinstance(tz, ZoneInfo) else get_zone(tz)
    local = _ensure_aware(instant).astimezone(zone)
    # Python counts Monday as 0; shift so Sunday is 0.
    weekday = (local.weekday() + 1) % 7
    return TimeParts(
        second=local.second,
        minute=local.minute,
        hour=local.hour,
        day=local.day,
        month=local.month,
        weekday=weekday,
    )


__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "TimeParts",
    "get_zone",
    "time_parts",
    "validate_timezone",
]
