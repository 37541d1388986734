"""Key-value persistence contract for the session counters."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional, Protocol, Union

logger = logging.getLogger(__name__)


class PersistenceKey(str, Enum):
    """Keys the tracker persists between launches."""

    LAST_SESSION_DURATION = "lastSessionDuration"
    TOTAL_SESSION_COUNT = "totalSessionCount"


class SessionStore(Protocol):
    """Any durable key-value store satisfies this."""

    def save(self, value: Any, key: PersistenceKey) -> None: ...

    def retrieve(self, key: PersistenceKey) -> Optional[Any]: ...


def read_counter(store: SessionStore, key: PersistenceKey) -> Union[float, int]:
    """Read one persisted counter, falling back to ``0`` for anything unusable.

    ``lastSessionDuration`` comes back as a ``float`` and ``totalSessionCount``
    as an ``int``.  Missing keys, store errors, booleans, values of another
    type and negative numbers all read as zero.
    """
    kind = int if key is PersistenceKey.TOTAL_SESSION_COUNT else float
    try:
        value = store.retrieve(key)
    except Exception as exc:
        logger.warning("could not read %s, using 0: %s", key.value, exc)
        return kind(0)
    if value is None:
        return kind(0)
    accepted = (int,) if kind is int else (int, float)
    if isinstance(value, bool) or not isinstance(value, accepted):
        logger.warning("ignoring stored %s of type %s", key.value, type(value).__name__)
        return kind(0)
    return kind(max(0, value))


__all__ = ["PersistenceKey", "SessionStore", "read_counter"]
