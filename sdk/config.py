from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pathlib import Path
import logging
import os

from config.paths import Paths
from core.tracker import DEFAULT_SESSION_TIMEOUT

logger = logging.getLogger(__name__)

def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")

def _env_timeout() -> float:
    raw = os.getenv("USAGE_SESSIONS_TIMEOUT")
    if raw is None:
        return DEFAULT_SESSION_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        logger.warning("ignoring USAGE_SESSIONS_TIMEOUT=%r, using %s", raw, DEFAULT_SESSION_TIMEOUT)
        return DEFAULT_SESSION_TIMEOUT

class TrackerConfig(BaseModel):
    model_config = ConfigDict(validate_default=True)

    paths: Paths = Field(default_factory=Paths.from_env)
    session_timeout: float = Field(default_factory=_env_timeout)
    store: str = Field(default_factory=lambda: os.getenv("USAGE_SESSIONS_STORE", "store.json"))
    scheduler: str = "scheduler.threading"
    journal: bool = Field(default_factory=lambda: _env_flag("USAGE_SESSIONS_JOURNAL"))
    plugins: dict = Field(default_factory=lambda: {
        "store.json": "plugins.stores.json_file.impl:JsonFileStore",
        "store.memory": "plugins.stores.memory.impl:MemoryStore",
        "scheduler.threading": "core.timing.scheduler:ThreadingScheduler",
        "writer.journal": "plugins.writers.jsonl.impl:JsonlWriter",
    })

    @field_validator("session_timeout")
    @classmethod
    def _clamp_timeout(cls, v: float) -> float:
        return max(0.0, float(v))

    @property
    def store_path(self) -> Path:
        return self.paths.store_path

def load_config(**overrides) -> TrackerConfig:
    """Build a config from the environment, with explicit overrides on top."""
    return TrackerConfig(**overrides)

SDK_CONFIG = TrackerConfig()
