"""A single usage session: a contiguous span of foreground use."""

from __future__ import annotations

from typing import Optional

from core.events import SessionRecord
from core.timing.clock import Clock
from core.timing.session_timer import SessionTimer
from sdk.ids import new_session_id


class Session:
    def __init__(self, clock: Clock, session_id: Optional[str] = None):
        self.session_id = session_id or new_session_id()
        self._timer = SessionTimer(clock=clock)
        self._timer.start()

    @property
    def started_at(self) -> float:
        return self._timer.started_at  # type: ignore[return-value]

    @property
    def ended_at(self) -> Optional[float]:
        return self._timer.stopped_at

    @property
    def active(self) -> bool:
        return self._timer.running

    @property
    def duration(self) -> float:
        return self._timer.elapsed

    def end(self) -> float:
        """Close the session and return its duration in seconds."""
        return self._timer.stop()

    def record(self) -> SessionRecord:
        return SessionRecord(
            id=self.session_id,
            started_at=self.started_at,
            ended_at=self.ended_at,
            duration_s=None if self.active else self.duration,
        )

    def __repr__(self) -> str:
        state = "active" if self.active else f"ended after {self.duration:.3f}s"
        return f"Session({self.session_id}, {state})"


__all__ = ["Session"]
