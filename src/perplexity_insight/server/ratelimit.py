"""RateLimiter — bounds outbound call volume with minute and day windows."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from pydantic import BaseModel

from perplexity_insight.errors import RateLimitExceededError

logger = logging.getLogger(__name__)

MINUTE_SECONDS = 60.0
DAY_SECONDS = 86_400.0


class RateWindow(BaseModel):
    """Counters for the current minute and day windows."""

    minute: int = 0
    day: int = 0
    last_minute_reset: float = 0.0
    last_day_reset: float = 0.0


class RateLimiter:
    """Counts gated calls and refuses them once a window is full.

    Both windows are fixed intervals measured on *clock*: the minute window
    rolls over once 60 seconds have elapsed since its last reset, the day
    window once 24 hours have.  A refused call leaves the counters untouched.

    Usage::

        limiter = RateLimiter(per_minute=60, per_day=10_000)
        limiter.check()   # raises RateLimitExceededError when exhausted
    """

    def __init__(
        self,
        *,
        per_minute: int = 60,
        per_day: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if per_minute < 1 or per_day < 1:
            msg = "rate limits must be positive"
            raise ValueError(msg)
        self.per_minute = per_minute
        self.per_day = per_day
        self._clock = clock
        now = clock()
        self._window = RateWindow(last_minute_reset=now, last_day_reset=now)
        self._lock = threading.Lock()

    @property
    def window(self) -> RateWindow:
        """A snapshot of the current counters."""
        with self._lock:
            return self._window.model_copy()

    def check(self) -> None:
        """Count one call, or raise :class:`RateLimitExceededError`."""
        with self._lock:
            now = self._clock()
            window = self._window

            if now - window.last_minute_reset >= MINUTE_SECONDS:
                window.minute = 0
                window.last_minute_reset = now
            if now - window.last_day_reset >= DAY_SECONDS:
                window.day = 0
                window.last_day_reset = now

            if window.minute >= self.per_minute:
                logger.warning("Per-minute limit of %d reached", self.per_minute)
                raise RateLimitExceededError("minute", self.per_minute)
            if window.day >= self.per_day:
                logger.warning("Per-day limit of %d reached", self.per_day)
                raise RateLimitExceededError("day", self.per_day)

            window.minute += 1
            window.day += 1
