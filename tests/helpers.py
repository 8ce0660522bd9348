"""Sample eCAR events shared by the test suites."""

from __future__ import annotations

import gzip
import json
from pathlib import Path


def make_event(**overrides) -> dict:
    """Return a complete eCAR event, with *overrides* applied."""
    event = {
        "id": "e1",
        "action": "open",
        "actorID": "a1",
        "objectID": "o1",
        "object": "file.txt",
        "hostname": "h",
        "pid": "1",
        "ppid": "0",
        "timestamp": "T",
    }
    event.update(overrides)
    return event


def _lines(events: list[dict | str]) -> str:
    return "".join(
        (event if isinstance(event, str) else json.dumps(event)) + "\n"
        for event in events
    )


def write_events(path: Path, events: list[dict | str]) -> Path:
    """Write *events* as JSON lines; strings are written verbatim."""
    path.write_text(_lines(events), encoding="utf-8")
    return path


def write_events_gz(path: Path, events: list[dict | str]) -> Path:
    """Gzip variant of ``write_events``."""
    with gzip.open(path, "wt", encoding="utf-8") as handle:
        handle.write(_lines(events))
    return path
