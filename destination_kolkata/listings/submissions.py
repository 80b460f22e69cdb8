"""
Public listing submissions.

A submission is stored straight into the listing collection as ``pending``;
it stays invisible to the public list and detail endpoints until an
operator changes its status.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping

import pandas as pd

from .data_store import get_store
from .documents import InvalidDocument
from .resources import ResourceConfig

logger = logging.getLogger(__name__)

# Owned by the directory, never by the submitter.
PROTECTED_FIELDS = (
    "_id",
    "slug",
    "status",
    "featured",
    "promoted",
    "rating",
    "reviewCount",
    "distance",
    "createdAt",
)


class SubmissionError(ValueError):
    """Invalid submission payload; ``fields`` names the offending fields."""

    def __init__(self, message: str, fields: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.fields = fields


def _lookup(payload: Mapping[str, Any], field: str) -> Any:
    value: Any = payload
    for part in field.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def missing_fields(payload: Mapping[str, Any], resource: ResourceConfig) -> tuple[str, ...]:
    return tuple(f for f in resource.required_fields if not _lookup(payload, f))


def _check_event_dates(
    payload: Mapping[str, Any],
    now: datetime,
) -> tuple[pd.Timestamp, pd.Timestamp | None]:
    """Validated, UTC-normalized start and end of an event submission."""
    try:
        start = pd.Timestamp(payload["startDate"])
        end = pd.Timestamp(payload["endDate"]) if payload.get("endDate") else None
    except (ValueError, TypeError) as exc:
        raise SubmissionError(f"Invalid event date: {exc}", ("startDate",)) from None
    if pd.isna(start) or (end is not None and pd.isna(end)):
        raise SubmissionError("Invalid event date", ("startDate",))
    if start.tzinfo is None:
        start = start.tz_localize("UTC")
    if end is not None and end.tzinfo is None:
        end = end.tz_localize("UTC")
    if start < pd.Timestamp(now).normalize():
        raise SubmissionError("Event start date cannot be in the past", ("startDate",))
    if end is not None and end < start:
        raise SubmissionError("Event end date cannot be before start date", ("endDate",))
    return start, end


def submit_listing(
    resource: ResourceConfig,
    payload: Mapping[str, Any],
    now: datetime | None = None,
) -> dict[str, Any]:
    """Validate and store a submission; returns the stored document."""
    missing = missing_fields(payload, resource)
    if missing:
        raise SubmissionError(f"Missing required fields: {', '.join(missing)}", missing)

    now = now or datetime.now(timezone.utc)
    document = {k: v for k, v in payload.items() if k not in PROTECTED_FIELDS}
    if resource.date_field:
        start, end = _check_event_dates(payload, now)
        document["startDate"] = start.isoformat()
        if end is not None:
            document["endDate"] = end.isoformat()

    document.update(
        status="pending",
        featured=False,
        promoted=False,
        rating={"average": 0.0, "count": 0},
        createdAt=now.isoformat(),
    )
    try:
        stored = get_store(resource.name).insert(document)
    except InvalidDocument as exc:
        raise SubmissionError(str(exc), (exc.field,)) from None

    logger.info("Stored pending %s submission %s", resource.name, stored["_id"])
    return stored
