from __future__ import annotations
from typing import Any, Dict, Optional
from core.persistence import PersistenceKey
class MemoryStore:
    """Process-local store. Forgets everything on exit."""
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self.values: Dict[str, Any] = dict(initial or {})
    @classmethod
    def from_config(cls, config) -> "MemoryStore": return cls()
    def save(self, value: Any, key: PersistenceKey) -> None: self.values[PersistenceKey(key).value] = value
    def retrieve(self, key: PersistenceKey) -> Optional[Any]: return self.values.get(PersistenceKey(key).value)
    def clear(self) -> None: self.values.clear()
