"""Clocks used for session and background-interval arithmetic."""

from __future__ import annotations

import threading
import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        """Return the current instant in seconds."""


class SystemClock:
    """Wall-clock time, so that suspended intervals count towards durations."""

    def now(self) -> float:
        return time.time()


class ManualClock:
    """Clock that only moves when told to. Used by tests and ``simulate``."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._lock = threading.Lock()

    def now(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError("cannot move a clock backwards")
        with self._lock:
            self._now += seconds
            return self._now

    def set(self, instant: float) -> None:
        with self._lock:
            self._now = float(instant)


__all__ = ["Clock", "SystemClock", "ManualClock"]
