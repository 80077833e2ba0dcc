from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Hover throttling depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class Throttle:
    """Lets an action through at most once per ``interval_s`` of clock time."""

    def __init__(self, *, clock: Clock, interval_s: float) -> None:
        if interval_s < 0:
            raise ValueError("interval_s must be >= 0")
        self._clock = clock
        self._interval_s = float(interval_s)
        self._last_s: float | None = None

    def ready(self) -> bool:
        now = self._clock.now()
        if self._last_s is not None and (now - self._last_s) < self._interval_s:
            return False
        self._last_s = now
        return True

    def reset(self) -> None:
        self._last_s = None
