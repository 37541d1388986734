# config/paths.py
"""
On-disk locations for the usage-session tracker.

- Honors USAGE_SESSIONS_DATA_ROOT
- Sensible OS defaults when the env var is not provided
- Helpers for the counter store and the session journal
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path


# ---------- OS defaults (used only if env vars not set) ----------

def _platform_default_base() -> Path:
    """
    Returns an OS-specific base directory for user data:
    - Windows: %LOCALAPPDATA%/UsageSessions
    - macOS:   ~/Library/Application Support/UsageSessions
    - Linux:   ~/.local/share/usage-sessions
    """
    if sys.platform.startswith("win"):
        base = os.getenv("LOCALAPPDATA") or os.getenv("APPDATA") or str(Path.home() / "AppData" / "Local")
        return Path(base) / "UsageSessions"
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "UsageSessions"
    else:
        return Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share")) / "usage-sessions"


def _env_or_default_data_root() -> Path:
    return Path(os.getenv("USAGE_SESSIONS_DATA_ROOT", _platform_default_base()))


# ---------- Core dataclass ----------

@dataclass(frozen=True)
class Paths:
    """
    Canonical path container.
    """
    data_root: Path

    @staticmethod
    def from_env() -> "Paths":
        return Paths(_env_or_default_data_root())

    @property
    def store_path(self) -> Path:
        """JSON object holding the persisted counters."""
        return self.data_root / "session_store.json"

    @property
    def journal_path(self) -> Path:
        """Append-only JSONL log of session events."""
        return self.data_root / "journal" / "events.jsonl"
