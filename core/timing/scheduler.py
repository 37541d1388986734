"""One-shot timer scheduling.

``ThreadingScheduler`` runs callbacks on daemon ``threading.Timer`` threads,
which is what a long-running process wants.  ``ManualScheduler`` keeps a
queue of due times against a :class:`~core.timing.clock.ManualClock` and
only fires callbacks when the clock is advanced through it, so that the
background-timeout logic can be replayed deterministically.
"""

from __future__ import annotations

import heapq
import itertools
import threading
from typing import Callable, List, Optional, Protocol, Tuple

from core.timing.clock import ManualClock

Callback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callback) -> TimerHandle: ...


class ThreadingScheduler:
    """Schedule callbacks on daemon timer threads."""

    def __init__(self, name: str = "session-timeout") -> None:
        self.name = name

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        timer = threading.Timer(max(0.0, float(delay)), callback)
        timer.name = self.name
        timer.daemon = True
        timer.start()
        return timer


class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Fire callbacks as a manual clock is advanced past their due time."""

    def __init__(self, clock: Optional[ManualClock] = None) -> None:
        self.clock = clock or ManualClock()
        self._queue: List[Tuple[float, int, _ManualHandle, Callback]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        handle = _ManualHandle()
        due = self.clock.now() + max(0.0, float(delay))
        heapq.heappush(self._queue, (due, next(self._seq), handle, callback))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing every callback that falls due.

        Each callback observes the clock at its own due time.  Returns the
        number of callbacks fired.
        """

        if seconds < 0:
            raise ValueError("cannot move a clock backwards")
        target = self.clock.now() + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.clock.set(max(due, self.clock.now()))
            handle.cancelled = True
            callback()
            fired += 1
        self.clock.set(target)
        return fired


__all__ = [
    "Callback",
    "TimerHandle",
    "Scheduler",
    "ThreadingScheduler",
    "ManualScheduler",
]
