"""
In-process log of listing activity.

Oldest events fall off once ``ANALYTICS_MAX_EVENTS`` is reached, so a
long-running server keeps a rolling window rather than every request.
"""
from __future__ import annotations

import os
import threading
import time
from collections import deque
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[2] / ".env")

MAX_EVENTS = int(os.getenv("ANALYTICS_MAX_EVENTS", "10000"))

_events: deque[dict[str, Any]] = deque(maxlen=MAX_EVENTS)
_lock = threading.Lock()


def record_event(event_type: str, data: dict[str, Any]) -> None:
    event = {"type": event_type, "timestamp": time.time(), **data}
    with _lock:
        _events.append(event)


def get_events(
    event_type: str | None = None,
    resource: str | None = None,
    since: float | None = None,
) -> list[dict[str, Any]]:
    """Snapshot of the log, optionally narrowed by type, listing type and age."""
    with _lock:
        events = list(_events)
    return [
        e for e in events
        if (event_type is None or e["type"] == event_type)
        and (resource is None or e.get("resource") == resource)
        and (since is None or e["timestamp"] >= since)
    ]


def clear_events() -> None:
    with _lock:
        _events.clear()
