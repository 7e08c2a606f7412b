"""Clock implementations."""

from __future__ import annotations

import threading
import time


class SystemClock:
    """Wall-clock seconds that never go backwards.

    If the system clock steps back, the last returned value is repeated.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = 0

    def now(self) -> int:
        with self._lock:
            self._last = max(self._last, int(time.time()))
            return self._last


class ManualClock:
    """Clock advanced explicitly, for tests and simulations."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError(f"Clock cannot start before zero: {start}")
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            raise ValueError(f"Clock cannot move backwards: {seconds}")
        self._now += seconds
        return self._now
