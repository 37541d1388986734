import json

import pytest

from core.events import Event, event_dump
from plugins.writers.jsonl.impl import JsonlWriter


def test_writes_one_object_per_line(tmp_path):
    path = tmp_path / "journal" / "events.jsonl"
    writer = JsonlWriter(path, flush_every=2)
    writer.write(event_dump(Event(kind="session.started", session="abc", data={"started_at": 1.5})))
    writer.write({"kind": "custom", "text": "ünïcode"})
    writer.close()

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["kind"] == "session.started"
    assert first["session"] == "abc"
    assert first["data"] == {"started_at": 1.5}
    assert first["id"] and first["ts_ms"] > 0
    assert json.loads(lines[1])["text"] == "ünïcode"


def test_appends_across_writers(tmp_path):
    path = tmp_path / "events.jsonl"
    for n in range(2):
        w = JsonlWriter(path)
        w.write({"n": n})
        w.close()
    assert [json.loads(x)["n"] for x in path.read_text(encoding="utf-8").splitlines()] == [0, 1]


def test_write_after_close_raises(tmp_path):
    writer = JsonlWriter(tmp_path / "events.jsonl")
    writer.close()
    writer.close()
    assert writer.closed
    with pytest.raises(ValueError):
        writer.write({"n": 1})


def test_event_rejects_unknown_kind():
    with pytest.raises(ValueError):
        Event(kind="frame")
