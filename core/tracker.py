"""Usage-session tracking driven by host lifecycle signals.

:class:`SessionTracker` keeps exactly one active :class:`~core.session.Session`
and decides where session boundaries fall:

* a foreground transition whose preceding background interval lasted at
  least ``session_timeout`` seconds ends the current session and starts a
  new one;
* termination ends the current session without starting another;
* while backgrounded, a one-shot timer covered by a keep-alive grant ends
  the session once the timeout elapses, in case the process never comes
  back to the foreground.

The duration of the last finished session and the number of sessions ever
started are written through to a :class:`~core.persistence.SessionStore` on
every change and read back at construction.

All state changes happen under one re-entrant lock.  Timer callbacks carry
the generation they were armed with and are ignored once a foreground
transition (or anything else that releases the timer) has moved on.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

from core.events import Event, EventKind, event_dump
from core.lifecycle import (
    INVALID_GRANT,
    AppState,
    HostLifecycle,
    LifecycleSignal,
    Subscription,
)
from core.persistence import PersistenceKey, SessionStore, read_counter
from core.session import Session
from core.timing.clock import Clock, SystemClock
from core.timing.scheduler import Scheduler, ThreadingScheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TIMEOUT = 60.0


class SessionTracker:
    """Track app usage sessions across background/foreground transitions.

    Parameters
    ----------
    host:
        Lifecycle host the tracker subscribes to and requests keep-alive
        grants from.
    store:
        Durable key-value store for the two persisted counters.
    timeout:
        Seconds the app must spend in the background before the session is
        considered over.  Negative values are clamped to ``0``.
    clock:
        Time source for all duration arithmetic (wall clock by default).
    scheduler:
        Arms the one-shot background timer (daemon threads by default).
    journal:
        Optional sink with a ``write(dict)`` method that receives one
        :class:`~core.events.Event` per session or lifecycle change.

    A session is started as soon as the tracker is constructed.
    """

    def __init__(
        self,
        host: HostLifecycle,
        store: SessionStore,
        *,
        timeout: float = DEFAULT_SESSION_TIMEOUT,
        clock: Optional[Clock] = None,
        scheduler: Optional[Scheduler] = None,
        journal: Optional[Any] = None,
    ) -> None:
        self._host = host
        self._store = store
        self._clock = clock or SystemClock()
        self._scheduler = scheduler or ThreadingScheduler()
        self._journal = journal
        self._lock = threading.RLock()

        self._session_timeout = max(0.0, float(timeout))
        self._session: Optional[Session] = None
        self._background_entered_at: Optional[float] = None

        self._timer: Optional[TimerHandle] = None
        self._timer_generation = 0
        self._grant = INVALID_GRANT

        self._last_session_duration = float(read_counter(store, PersistenceKey.LAST_SESSION_DURATION))
        self._total_session_count = int(read_counter(store, PersistenceKey.TOTAL_SESSION_COUNT))

        self._closed = False
        self._subscriptions: List[Subscription] = [
            host.subscribe(LifecycleSignal.DID_ENTER_BACKGROUND, self.on_enter_background),
            host.subscribe(LifecycleSignal.WILL_ENTER_FOREGROUND, self.on_enter_foreground),
            host.subscribe(LifecycleSignal.WILL_TERMINATE, self.on_will_terminate),
        ]
        self._start_new_session()

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------
    @property
    def session_timeout(self) -> float:
        return self._session_timeout

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def session_id(self) -> Optional[str]:
        session = self._session
        return session.session_id if session is not None else None

    @property
    def closed(self) -> bool:
        return self._closed

    def set_timeout(self, seconds: float) -> None:
        """Update the background time after which a session ends (minimum 0)."""
        with self._lock:
            self._session_timeout = max(0.0, float(seconds))

    def current_session_duration(self) -> float:
        """Seconds since the active session started, ``0.0`` if there is none."""
        with self._lock:
            if self._session is None:
                return 0.0
            return self._session.duration

    def previous_session_duration(self) -> float:
        return self._last_session_duration

    def total_session_count(self) -> int:
        return self._total_session_count

    def close(self) -> None:
        """Deregister the lifecycle handlers and release the timer and grant."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for subscription in self._subscriptions:
                subscription.cancel()
            self._subscriptions = []
            self._end_background_task()

    def __enter__(self) -> "SessionTracker":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Lifecycle handlers
    # ------------------------------------------------------------------
    def on_enter_background(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._background_entered_at = self._clock.now()
            logger.debug("entered background at %.3f", self._background_entered_at)
            self._journal_event("lifecycle.background", {"timeout_s": self._session_timeout})
            self._start_background_task()

    def on_enter_foreground(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._end_background_task()
            entered_at, self._background_entered_at = self._background_entered_at, None
            if entered_at is None:
                return
            background_duration = self._clock.now() - entered_at
            logger.debug("back in foreground after %.3f seconds", background_duration)
            self._journal_event("lifecycle.foreground", {"background_s": background_duration})
            if background_duration >= self._session_timeout:
                self._end_session()
                self._start_new_session()
            elif self._session is None:
                # The timer ended the session under a shorter timeout.
                self._start_new_session()

    def on_will_terminate(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._journal_event("lifecycle.terminate")
            self._end_session()
            self._end_background_task()
            self._background_entered_at = None

    # ------------------------------------------------------------------
    # Session boundaries
    # ------------------------------------------------------------------
    def _start_new_session(self) -> None:
        if self._session is not None:
            self._end_session()
        self._session = Session(self._clock)
        self._set_total_session_count(self._total_session_count + 1)
        logger.info("new session started: %s", self._session.session_id)
        self._journal_event("session.started", self._session.record().model_dump())

    def _end_session(self) -> None:
        session = self._session
        if session is None:
            return
        self._set_last_session_duration(session.end())
        self._session = None
        logger.info("session %s ended after %.3f seconds", session.session_id, self._last_session_duration)
        self._journal_event("session.ended", session.record().model_dump(), session=session)

    # ------------------------------------------------------------------
    # Background timer and keep-alive grant
    # ------------------------------------------------------------------
    def _start_background_task(self) -> None:
        # A second background signal without a foreground in between must
        # not leak the first grant or timer.
        self._end_background_task()
        self._grant = self._host.begin_background_task(self._end_background_task)
        self._timer_generation += 1
        generation = self._timer_generation
        self._timer = self._scheduler.call_later(
            self._session_timeout, lambda: self._on_background_timeout(generation)
        )

    def _end_background_task(self) -> None:
        with self._lock:
            self._timer_generation += 1
            timer, self._timer = self._timer, None
            if timer is not None:
                timer.cancel()
            grant, self._grant = self._grant, INVALID_GRANT
            if grant != INVALID_GRANT:
                self._host.end_background_task(grant)

    def _on_background_timeout(self, generation: int) -> None:
        with self._lock:
            if generation != self._timer_generation or self._closed:
                return
            self._timer = None
            if self._host.application_state is not AppState.BACKGROUND:
                return
            logger.debug("background timeout of %.3f seconds reached", self._session_timeout)
            self._journal_event("timeout.fired", {"timeout_s": self._session_timeout})
            self._end_session()
            self._end_background_task()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def _set_last_session_duration(self, seconds: float) -> None:
        self._last_session_duration = float(seconds)
        self._persist(PersistenceKey.LAST_SESSION_DURATION, self._last_session_duration)

    def _set_total_session_count(self, count: int) -> None:
        self._total_session_count = int(count)
        self._persist(PersistenceKey.TOTAL_SESSION_COUNT, self._total_session_count)

    def _persist(self, key: PersistenceKey, value: Any) -> None:
        try:
            self._store.save(value, key)
        except Exception as exc:
            logger.warning("could not persist %s=%r: %s", key.value, value, exc)

    # ------------------------------------------------------------------
    # Journal
    # ------------------------------------------------------------------
    def _journal_event(
        self,
        kind: EventKind,
        data: Optional[Dict[str, Any]] = None,
        session: Optional[Session] = None,
    ) -> None:
        if self._journal is None:
            return
        session = session or self._session
        event = Event(
            kind=kind,
            session=session.session_id if session is not None else None,
            data=data or {},
        )
        try:
            self._journal.write(event_dump(event))
        except Exception as exc:
            logger.warning("dropping journal event %s: %s", kind, exc)


__all__ = ["DEFAULT_SESSION_TIMEOUT", "SessionTracker"]
