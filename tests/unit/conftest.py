import pytest

from core.lifecycle import InProcessHost
from core.timing.clock import ManualClock
from core.timing.scheduler import ManualScheduler
from core.tracker import SessionTracker
from plugins.stores.memory.impl import MemoryStore

# Arbitrary epoch so that "0 seconds" never doubles as "unset".
EPOCH = 1_700_000_000.0


@pytest.fixture
def clock():
    return ManualClock(start=EPOCH)


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def host():
    return InProcessHost()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def make_tracker(host, store, clock, scheduler):
    """Factory so tests can pick the timeout (and optionally a journal)."""
    created = []

    def _make(timeout=60.0, **kwargs):
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("scheduler", scheduler)
        tracker = SessionTracker(host, kwargs.pop("store", store), timeout=timeout, **kwargs)
        created.append(tracker)
        return tracker

    yield _make
    for tracker in created:
        tracker.close()


class RecordingJournal:
    def __init__(self):
        self.events = []

    def write(self, obj):
        self.events.append(obj)

    def kinds(self):
        return [e["kind"] for e in self.events]


@pytest.fixture
def journal():
    return RecordingJournal()
