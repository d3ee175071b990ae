"""Tick engine for recurring patterns.

This module wraps APScheduler to provide:
- One periodic tick job per registration
- Timezone-aware evaluation of all six fields on every tick
- At most one callback invocation per wall-clock second
- Immediate, idempotent cancellation
"""

from __future__ import annotations

import logging
import math
import threading
import uuid
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from apscheduler.events import (
    EVENT_JOB_ERROR,
    EVENT_JOB_MAX_INSTANCES,
    EVENT_JOB_MISSED,
    JobEvent,
    JobExecutionEvent,
)
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..core.config import EngineConfig
from ..core.logger import get_logger, log_exception
from .clock import Clock, SystemClock

if TYPE_CHECKING:
    from .expressions import Pattern

logger = get_logger("scheduler.engine")


class RegistrationState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    STOPPED = "stopped"


class Registration:
    """One pattern + callback pair and its run state.

    ``tick`` performs a single evaluation: read the clock, project it into the
    pattern's timezone, match all six fields and, on a match that has not
    already fired for the current epoch second, call the callback
    synchronously. The check-and-set and the call happen under one lock, and
    ``cancel`` takes the same lock, so once ``cancel`` returns no further
    call can happen.
    """

    def __init__(
        self,
        pattern: Pattern,
        callback: Callable[[], Any],
        clock: Clock | None = None,
        on_cancel: Callable[[Registration], None] | None = None,
        registration_id: str | None = None,
    ) -> None:
        if not callable(callback):
            raise TypeError("callback must be callable")
        self.id = registration_id or uuid.uuid4().hex
        self.pattern = pattern
        self.callback = callback
        self._clock = clock or SystemClock()
        self._on_cancel = on_cancel
        self._lock = threading.RLock()
        self._state = RegistrationState.IDLE

        self.last_fired: int | None = None
        self.last_fired_at: datetime | None = None
        self.fire_count = 0

    @property
    def state(self) -> RegistrationState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state is not RegistrationState.STOPPED

    def arm(self) -> None:
        with self._lock:
            if self._state is RegistrationState.STOPPED:
                raise RuntimeError(f"Registration {self.id} has been cancelled")
            self._state = RegistrationState.ARMED

    def tick(self) -> bool:
        """Evaluate the pattern once. Only an armed registration fires.

        Returns:
            True if the callback was invoked

        Exceptions raised by the callback propagate to the caller.
        """
        with self._lock:
            if self._state is not RegistrationState.ARMED:
                return False
            now = self._clock.now()
            if not self.pattern.matches(now):
                return False
            second_id = math.floor(now.timestamp())
            if second_id == self.last_fired:
                logger.debug(f"Registration {self.id} already fired for second {second_id}")
                return False
            self.last_fired = second_id
            self.last_fired_at = now
            self.fire_count += 1
            self.callback()
            return True

    def cancel(self) -> None:
        """Stop the registration. Calling it again is a no-op."""
        with self._lock:
            if self._state is RegistrationState.STOPPED:
                return
            self._state = RegistrationState.STOPPED
        if self._on_cancel is not None:
            self._on_cancel(self)
        logger.debug(f"Registration {self.id} cancelled")

    def __repr__(self) -> str:
        return (
            f"Registration(id={self.id!r}, pattern={self.pattern.cron!r}, "
            f"state={self._state.value!r}, fire_count={self.fire_count})"
        )


class SchedulerEngine:
    """Drives registrations from an APScheduler background scheduler.

    Each registration gets its own interval job. Jobs run with
    ``max_instances=1``, so a tick that would overlap a slow callback is
    dropped instead of running concurrently.

    Example:
        ```python
        from cronwhen import SchedulerEngine, when

        with SchedulerEngine() as engine:
            registration = engine.start(when().sec({"every": 10}), poll)
            ...
            registration.cancel()
        ```
    """

    def __init__(self, config: EngineConfig | None = None, clock: Clock | None = None):
        """Initialize the engine.

        Args:
            config: Engine configuration
            clock: Time source used by every registration
        """
        self.config = config or EngineConfig()
        self.clock: Clock = clock or SystemClock()
        self._registrations: dict[str, Registration] = {}
        self._lock = threading.Lock()
        self._closed = False
        self._scheduler: BackgroundScheduler | None = None
        self._setup_scheduler()

    def _setup_scheduler(self) -> None:
        """Setup APScheduler with an in-memory job store."""
        # Callback failures are logged once, by _job_error.
        logging.getLogger("apscheduler.executors.default").setLevel(logging.CRITICAL)
        executors = {"default": ThreadPoolExecutor(max_workers=self.config.max_workers)}
        job_defaults = {
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": self.config.misfire_grace_time,
        }

        self._scheduler = BackgroundScheduler(
            jobstores={"default": MemoryJobStore()},
            executors=executors,
            job_defaults=job_defaults,
            timezone=self.config.timezone,
        )

        self._scheduler.add_listener(self._job_error, EVENT_JOB_ERROR)
        self._scheduler.add_listener(self._job_skipped, EVENT_JOB_MISSED | EVENT_JOB_MAX_INSTANCES)

        logger.debug(f"Engine initialized with tick interval {self.config.tick_interval}s")

    def _job_error(self, event: JobExecutionEvent) -> None:
        """Handler for callbacks that raised."""
        log_exception(logger, event.exception, f"Callback for registration {event.job_id} failed")

    def _job_skipped(self, event: JobEvent) -> None:
        reason = "missed" if event.code == EVENT_JOB_MISSED else "still running"
        logger.debug(f"Tick for registration {event.job_id} skipped ({reason})")

    @property
    def running(self) -> bool:
        return bool(self._scheduler and self._scheduler.running)

    @property
    def registrations(self) -> list[Registration]:
        with self._lock:
            return list(self._registrations.values())

    def get(self, registration_id: str) -> Registration | None:
        with self._lock:
            return self._registrations.get(registration_id)

    def start(self, pattern: Pattern, callback: Callable[[], Any]) -> Registration:
        """Register ``callback`` to run on every second matching ``pattern``.

        Args:
            pattern: Compiled pattern to evaluate
            callback: Zero-argument function

        Returns:
            The armed Registration; call ``cancel()`` on it to stop

        Raises:
            RuntimeError: If the engine has been shut down
        """
        if self._closed or not self._scheduler:
            raise RuntimeError("Engine has been shut down")

        registration = Registration(pattern, callback, clock=self.clock, on_cancel=self._remove)
        with self._lock:
            self._registrations[registration.id] = registration

        registration.arm()
        self._scheduler.add_job(
            registration.tick,
            IntervalTrigger(seconds=self.config.tick_interval, timezone=self.config.timezone),
            id=registration.id,
            name=pattern.cron,
        )
        with self._lock:
            if not self._scheduler.running:
                self._scheduler.start()
                logger.info("Engine started")

        logger.info(f"Registered {registration.id}: {pattern.cron}")
        return registration

    def _remove(self, registration: Registration) -> None:
        with self._lock:
            self._registrations.pop(registration.id, None)
        if not self._scheduler:
            return
        try:
            self._scheduler.remove_job(registration.id)
        except JobLookupError:
            logger.debug(f"Tick job {registration.id} was already removed")
        logger.info(f"Cancelled {registration.id}")

    def shutdown(self, wait: bool = True) -> None:
        """Cancel every registration and stop the scheduler.

        Args:
            wait: Whether to wait for running ticks to complete
        """
        self._closed = True
        for registration in self.registrations:
            registration.cancel()
        if self._scheduler and self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Engine stopped")

    def __enter__(self) -> SchedulerEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


_default_engine: SchedulerEngine | None = None
_default_lock = threading.Lock()


def get_default_engine() -> SchedulerEngine:
    """Return the shared engine, creating it on first use."""
    global _default_engine
    with _default_lock:
        if _default_engine is None or _default_engine._closed:
            _default_engine = SchedulerEngine()
        return _default_engine


def shutdown_default_engine(wait: bool = True) -> None:
    global _default_engine
    with _default_lock:
        engine, _default_engine = _default_engine, None
    if engine is not None:
        engine.shutdown(wait=wait)


__all__ = [
    "Registration",
    "RegistrationState",
    "SchedulerEngine",
    "get_default_engine",
    "shutdown_default_engine",
]
