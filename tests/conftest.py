"""Test configuration hooks."""

from datetime import datetime, timezone

import pytest

from cronwhen.scheduler import ManualClock, shutdown_default_engine

# 2024-06-15 09:30:45 UTC, a Saturday
FIXED_INSTANT = datetime(2024, 6, 15, 9, 30, 45, tzinfo=timezone.utc)


@pytest.fixture
def fixed_instant():
    """The instant every deterministic scheduler test is pinned to."""
    return FIXED_INSTANT


@pytest.fixture
def clock():
    """A manual clock pinned to FIXED_INSTANT."""
    return ManualClock(FIXED_INSTANT)


@pytest.fixture(scope="session", autouse=True)
def _stop_default_engine():
    """Make sure the shared engine's thread does not outlive the session."""
    yield
    shutdown_default_engine(wait=False)
