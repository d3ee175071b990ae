"""Tests for clocks and timezone-local time parts."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from cronwhen.scheduler import (
    DomainRangeError,
    ManualClock,
    SystemClock,
    TimeParts,
    time_parts,
    validate_timezone,
)


def test_time_parts_utc(fixed_instant):
    assert time_parts(fixed_instant, "UTC") == TimeParts(
        second=45, minute=30, hour=9, day=15, month=6, weekday=6
    )


def test_time_parts_other_zone(fixed_instant):
    parts = time_parts(fixed_instant, "America/New_York")
    assert (parts.hour, parts.minute, parts.second) == (5, 30, 45)
    assert parts.day == 15


def test_time_parts_half_hour_offset(fixed_instant):
    # India is UTC+05:30 all year
    parts = time_parts(fixed_instant, "Asia/Kolkata")
    assert (parts.hour, parts.minute) == (15, 0)


def test_sunday_is_zero():
    sunday = datetime(2024, 6, 16, 12, 0, tzinfo=timezone.utc)
    assert time_parts(sunday, "UTC").weekday == 0


def test_midnight_hour_is_zero():
    midnight = datetime(2024, 6, 16, 0, 0, tzinfo=timezone.utc)
    assert time_parts(midnight, "UTC").hour == 0


def test_naive_instant_rejected():
    with pytest.raises(ValueError):
        time_parts(datetime(2024, 6, 15, 9, 30), "UTC")


def test_validate_timezone():
    assert validate_timezone("Australia/Sydney") == "Australia/Sydney"
    with pytest.raises(DomainRangeError):
        validate_timezone("Garbage/Zone")
    with pytest.raises(DomainRangeError):
        validate_timezone("")


class TestManualClock:
    def test_now_is_pinned(self, fixed_instant):
        clock = ManualClock(fixed_instant)
        assert clock.now() == fixed_instant
        assert clock.now() == fixed_instant

    def test_advance(self, fixed_instant):
        clock = ManualClock(fixed_instant)
        assert clock.advance(1.5) == fixed_instant + timedelta(seconds=1.5)
        assert clock.now() == fixed_instant + timedelta(seconds=1.5)

    def test_set(self, fixed_instant):
        clock = ManualClock(fixed_instant)
        later = fixed_instant + timedelta(days=1)
        clock.set(later)
        assert clock.now() == later

    def test_rejects_naive(self):
        with pytest.raises(ValueError):
            ManualClock(datetime(2024, 6, 15))


def test_system_clock_is_aware():
    now = SystemClock().now()
    assert now.tzinfo is not None
    assert abs((datetime.now(timezone.utc) - now).total_seconds()) < 5
