from __future__ import annotations
import time, ulid
NS_PER_MS = 1_000_000
def now_ts_ms() -> int: return time.time_ns() // NS_PER_MS
def new_session_id() -> str: return str(ulid.new())
def new_event_id() -> str: return str(ulid.new())
