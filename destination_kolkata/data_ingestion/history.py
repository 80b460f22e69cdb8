from __future__ import annotations

import threading
from typing import Any

from ..listings.models import Pagination

_history: list[dict[str, Any]] = []
_lock = threading.Lock()


def record_run(entry: dict[str, Any]) -> None:
    with _lock:
        _history.append(entry)


def get_history(
    data_type: str | None = None,
    status: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> dict[str, Any]:
    """Ingestion runs, newest first, paginated like the listing endpoints."""
    with _lock:
        entries = list(reversed(_history))
    if data_type:
        entries = [e for e in entries if e["dataType"] == data_type]
    if status:
        entries = [e for e in entries if e["status"] == status]

    page, limit = max(1, page), max(1, limit)
    start = (page - 1) * limit
    return {
        "history": entries[start:start + limit],
        "pagination": Pagination.build(page, limit, len(entries)).model_dump(by_alias=True),
    }


def clear_history() -> None:
    with _lock:
        _history.clear()
