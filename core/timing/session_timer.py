from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from core.timing.clock import Clock, SystemClock


@dataclass
class SessionTimer:
    clock: Clock = field(default_factory=SystemClock)
    started_at: Optional[float] = None
    stopped_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self.started_at is not None and self.stopped_at is None

    def start(self) -> float:
        self.started_at = self.clock.now()
        self.stopped_at = None
        return self.started_at

    def stop(self) -> float:
        assert self.running
        self.stopped_at = self.clock.now()
        return self.elapsed

    @property
    def elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        end = self.clock.now() if self.stopped_at is None else self.stopped_at
        return max(0.0, end - self.started_at)
