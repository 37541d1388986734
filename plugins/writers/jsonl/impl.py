from __future__ import annotations
import json
from pathlib import Path
from typing import IO, Any, Dict, Optional
from threading import Lock


class JsonlWriter:
    """
    Append-only JSONL journal with periodic flush.
    Not safe across processes, but thread-safe within a process.
    """
    def __init__(self, out_path: Path, flush_every: int = 1):
        self.path = Path(out_path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._f: Optional[IO[str]] = self.path.open("a", encoding="utf-8")
        self._n = 0
        self._flush_every = max(1, flush_every)
        self._lock = Lock()

    @property
    def closed(self) -> bool:
        return self._f is None

    def write(self, obj: Dict[str, Any]) -> None:
        line = json.dumps(obj, ensure_ascii=False)
        with self._lock:
            if self._f is None:
                raise ValueError(f"journal {self.path} is closed")
            self._f.write(line + "\n")
            self._n += 1
            if self._n % self._flush_every == 0:
                self._f.flush()

    def close(self) -> None:
        with self._lock:
            if self._f is None:
                return
            try:
                self._f.flush()
            finally:
                self._f.close()
                self._f = None
