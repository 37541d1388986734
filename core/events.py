"""Journal event models emitted by the session tracker."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from sdk.ids import new_event_id, now_ts_ms

EventKind = Literal[
    "session.started",
    "session.ended",
    "lifecycle.background",
    "lifecycle.foreground",
    "lifecycle.terminate",
    "timeout.fired",
]


class Event(BaseModel):
    """One line of the session journal."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=new_event_id)
    ts_ms: int = Field(default_factory=now_ts_ms)
    kind: EventKind
    session: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class SessionRecord(BaseModel):
    """Snapshot of a session as it appears in ``session.*`` events."""

    id: str
    started_at: float
    ended_at: Optional[float] = None
    duration_s: Optional[float] = None


def event_dump(event: Event) -> Dict[str, Any]:
    """Return a JSON-ready ``dict`` for ``event``."""

    return event.model_dump(mode="json")


__all__ = ["Event", "EventKind", "SessionRecord", "event_dump"]
