"""Durable store backed by a single JSON object on disk."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from core.persistence import PersistenceKey

logger = logging.getLogger(__name__)


class JsonFileStore:
    """
    Keep the persisted counters in one JSON file.

    Every save rewrites the whole object through a temp file and
    ``os.replace`` so a crash mid-write never leaves a truncated file.
    A missing, unreadable or corrupt file reads as empty.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = Lock()
        self._values: Dict[str, Any] = self._load()

    @classmethod
    def from_config(cls, config) -> "JsonFileStore":
        return cls(config.store_path)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable session store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("ignoring session store %s: expected an object", self.path)
            return {}
        return data

    def save(self, value: Any, key: PersistenceKey) -> None:
        name = PersistenceKey(key).value
        with self._lock:
            previous = dict(self._values)
            self._values[name] = value
            try:
                self._flush()
            except Exception:
                self._values = previous
                raise

    def retrieve(self, key: PersistenceKey) -> Optional[Any]:
        with self._lock:
            return self._values.get(PersistenceKey(key).value)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._flush()

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._values)

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as fh:
                json.dump(self._values, fh, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
