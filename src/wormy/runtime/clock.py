# src/wormy/runtime/clock.py
from __future__ import annotations

import threading
import time
from typing import Protocol


class Clock(Protocol):
    """Trusted time source: integer seconds, never moves backwards."""

    def now(self) -> int: ...


class SystemClock:
    """Wall clock clamped to be monotonically non-decreasing.

    If the host wall clock steps back, the last observed value is returned
    until wall time catches up.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = 0

    def now(self) -> int:
        wall_now = int(time.time())
        with self._lock:
            if wall_now >= self._last:
                self._last = wall_now
            return int(self._last)


class ManualClock:
    """Deterministic clock for tests and simulations."""

    def __init__(self, start: int = 0) -> None:
        self._now = int(start)

    def now(self) -> int:
        return int(self._now)

    def set(self, ts: int) -> None:
        ts = int(ts)
        if ts < self._now:
            raise ValueError(f"clock cannot move backwards: {ts} < {self._now}")
        self._now = ts

    def advance(self, seconds: int) -> int:
        self.set(self._now + int(seconds))
        return self._now
