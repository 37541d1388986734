from __future__ import annotations
from importlib import import_module
from typing import Any, Mapping
class Registry:
    """Maps plugin keys to ``"module:Attribute"`` targets, imported on demand."""
    def __init__(self, targets: Mapping[str, str] | None = None):
        self._map: dict[str, str] = dict(targets or {})
    def update(self, targets: Mapping[str, str]) -> None:
        self._map.update(targets)
    def keys(self) -> list[str]:
        return sorted(self._map)
    def target(self, key: str) -> str:
        if key in self._map:
            return self._map[key]
        if ":" in key:
            return key
        raise KeyError(f"unknown plugin {key!r}; known: {', '.join(self.keys()) or 'none'}")
    def resolve(self, key: str) -> Any:
        mod_path, _, obj = self.target(key).partition(":")
        mod = import_module(mod_path)
        return getattr(mod, obj) if obj else mod
    def create(self, key: str, *args, **kwargs):
        return self.resolve(key)(*args, **kwargs)
REGISTRY = Registry()
