"""Host application lifecycle: signals, application state and keep-alive grants.

The tracker never talks to a concrete host.  It registers handlers through
:meth:`HostLifecycle.subscribe` and asks for keep-alive grants through
:meth:`HostLifecycle.begin_background_task`.  :class:`InProcessHost` is the
implementation used by plain Python applications and by the test-suite: the
application posts signals into it as its own state changes.
"""

from __future__ import annotations

import itertools
import logging
import threading
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

Handler = Callable[[], None]

INVALID_GRANT = 0


class LifecycleSignal(str, Enum):
    DID_ENTER_BACKGROUND = "did_enter_background"
    WILL_ENTER_FOREGROUND = "will_enter_foreground"
    WILL_TERMINATE = "will_terminate"


class AppState(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BACKGROUND = "background"


class Subscription:
    """Handle returned by :meth:`HostLifecycle.subscribe`."""

    def __init__(self, on_cancel: Callable[[], None]) -> None:
        self._on_cancel: Optional[Callable[[], None]] = on_cancel

    @property
    def active(self) -> bool:
        return self._on_cancel is not None

    def cancel(self) -> None:
        on_cancel, self._on_cancel = self._on_cancel, None
        if on_cancel is not None:
            on_cancel()


class HostLifecycle(Protocol):
    @property
    def application_state(self) -> AppState: ...

    def subscribe(self, signal: LifecycleSignal, handler: Handler) -> Subscription: ...

    def begin_background_task(self, expiration_handler: Optional[Handler] = None) -> int: ...

    def end_background_task(self, grant: int) -> None: ...


_SIGNAL_STATE = {
    LifecycleSignal.DID_ENTER_BACKGROUND: AppState.BACKGROUND,
    LifecycleSignal.WILL_ENTER_FOREGROUND: AppState.INACTIVE,
}


class InProcessHost:
    """Lifecycle host driven by the application itself."""

    def __init__(self, state: AppState = AppState.ACTIVE) -> None:
        self._state = state
        self._handlers: Dict[LifecycleSignal, List[Handler]] = {s: [] for s in LifecycleSignal}
        self._grants: Dict[int, Optional[Handler]] = {}
        self._grant_ids = itertools.count(INVALID_GRANT + 1)
        self._lock = threading.RLock()

    @property
    def application_state(self) -> AppState:
        return self._state

    def activate(self) -> None:
        """Finish a foreground transition (``inactive`` -> ``active``)."""
        self._state = AppState.ACTIVE

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------
    def subscribe(self, signal: LifecycleSignal, handler: Handler) -> Subscription:
        signal = LifecycleSignal(signal)
        with self._lock:
            self._handlers[signal].append(handler)

        def _remove() -> None:
            with self._lock:
                try:
                    self._handlers[signal].remove(handler)
                except ValueError:
                    pass

        return Subscription(_remove)

    def handler_count(self, signal: LifecycleSignal) -> int:
        with self._lock:
            return len(self._handlers[LifecycleSignal(signal)])

    def post(self, signal: LifecycleSignal) -> None:
        """Move to the state the signal implies, then notify handlers."""
        signal = LifecycleSignal(signal)
        with self._lock:
            if signal in _SIGNAL_STATE:
                self._state = _SIGNAL_STATE[signal]
            handlers = list(self._handlers[signal])
        logger.debug("posting %s to %d handler(s)", signal.value, len(handlers))
        for handler in handlers:
            handler()
        if signal is LifecycleSignal.WILL_ENTER_FOREGROUND:
            self.activate()

    # ------------------------------------------------------------------
    # Keep-alive grants
    # ------------------------------------------------------------------
    def begin_background_task(self, expiration_handler: Optional[Handler] = None) -> int:
        with self._lock:
            grant = next(self._grant_ids)
            self._grants[grant] = expiration_handler
        logger.debug("keep-alive grant %d issued", grant)
        return grant

    def end_background_task(self, grant: int) -> None:
        with self._lock:
            released = grant in self._grants
            self._grants.pop(grant, None)
        if released:
            logger.debug("keep-alive grant %d released", grant)

    @property
    def outstanding_grants(self) -> List[int]:
        with self._lock:
            return sorted(self._grants)

    def expire_background_tasks(self) -> int:
        """Run the expiration handler of every outstanding grant.

        Models the host's hard deadline for background execution.  Grants
        whose handler does not release them are released afterwards.
        """

        with self._lock:
            pending = list(self._grants.items())
        for grant, handler in pending:
            if handler is not None:
                handler()
            with self._lock:
                self._grants.pop(grant, None)
        return len(pending)


__all__ = [
    "AppState",
    "Handler",
    "HostLifecycle",
    "INVALID_GRANT",
    "InProcessHost",
    "LifecycleSignal",
    "Subscription",
]
