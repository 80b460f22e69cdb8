from __future__ import annotations

import copy
import math
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd

STATUSES = ("active", "inactive", "pending", "rejected")

# Stored as ISO strings, held as UTC timestamps inside the store.
DATE_FIELDS = ("createdAt", "startDate", "endDate")

# Columns the store guarantees even when a collection is empty.
BASE_COLUMNS = (
    "_id",
    "slug",
    "name",
    "status",
    "featured",
    "promoted",
    "rating.average",
    "rating.count",
    "location.coordinates",
    "createdAt",
)


class InvalidDocument(ValueError):
    """A listing record that cannot be stored; ``field`` names the culprit."""

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def new_id() -> str:
    return uuid.uuid4().hex[:24]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _valid_coordinates(coords: Any) -> bool:
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        return False
    try:
        lng, lat = float(coords[0]), float(coords[1])
    except (TypeError, ValueError):
        return False
    return -180.0 <= lng <= 180.0 and -90.0 <= lat <= 90.0


def prepare_document(
    raw: Mapping[str, Any],
    default_status: str = "active",
    now: str | None = None,
) -> dict[str, Any]:
    """
    Return a store-ready copy of a listing document.

    Fills identity, slug, status, rating, promotion flags and timestamps.
    Raises ``InvalidDocument`` (a ``ValueError``) when the record has no
    name, an unknown status, unusable coordinates or a malformed rating.
    """
    if not isinstance(raw, Mapping):
        raise InvalidDocument("record is not an object", "record")
    doc = copy.deepcopy(dict(raw))

    name = str(doc.get("name") or "").strip()
    if not name:
        raise InvalidDocument("listing has no name", "name")
    doc["name"] = name

    doc["_id"] = str(doc.get("_id") or new_id())
    doc["slug"] = doc.get("slug") or slugify(name)

    status = doc.get("status") or default_status
    if status not in STATUSES:
        raise InvalidDocument(f"invalid status: {status}", "status")
    doc["status"] = status

    location = doc.get("location") or {}
    if not isinstance(location, Mapping):
        raise InvalidDocument("location must be an object with coordinates", "location")
    if not _valid_coordinates(location.get("coordinates")):
        raise InvalidDocument("location.coordinates must be [longitude, latitude]", "location")
    doc["location"] = {
        "type": "Point",
        "coordinates": [float(c) for c in location["coordinates"]],
    }

    rating = doc.get("rating") or {}
    if not isinstance(rating, Mapping):
        raise InvalidDocument("rating must be an object with average and count", "rating")
    try:
        average = float(rating.get("average") or 0.0)
        count = int(rating.get("count") or 0)
    except (TypeError, ValueError):
        raise InvalidDocument("rating average and count must be numbers", "rating") from None
    doc["rating"] = {
        "average": max(0.0, min(5.0, average)),
        "count": max(0, count),
    }

    doc["featured"] = bool(doc.get("featured", False))
    doc["promoted"] = bool(doc.get("promoted", False))
    for key in ("images", "amenities", "tags"):
        values = doc.get(key) or []
        if not isinstance(values, (list, tuple)):
            raise InvalidDocument(f"{key} must be a list", key)
        doc[key] = list(values)
    doc["createdAt"] = doc.get("createdAt") or now or _now_iso()
    return doc


def primary_image(listing: Mapping[str, Any]) -> dict[str, Any] | None:
    """The image flagged primary, else the first image, else ``None``."""
    images = listing.get("images") or []
    for image in images:
        if isinstance(image, Mapping) and image.get("isPrimary"):
            return dict(image)
    return dict(images[0]) if images and isinstance(images[0], Mapping) else None


def rating_label(listing: Mapping[str, Any]) -> str | None:
    """Display rating such as ``"4.5 (1,245)"``; ``None`` means "no rating"."""
    rating = listing.get("rating") or {}
    count = int(rating.get("count") or 0)
    if count <= 0:
        return None
    return f"{float(rating.get('average') or 0.0):.1f} ({count:,})"


# ── DataFrame <-> document conversion ────────────────────────────────────


def frame_from_documents(documents: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Flatten nested documents into dotted columns (``rating.average``...)."""
    records = list(documents)
    if records:
        df = pd.json_normalize(records)
    else:
        df = pd.DataFrame()
    for col in BASE_COLUMNS:
        if col not in df.columns:
            df[col] = pd.Series(dtype=object)
    for col in DATE_FIELDS:
        if col in df.columns:
            df[col] = pd.to_datetime(df[col], utc=True, errors="coerce", format="ISO8601")
    return df.reset_index(drop=True)


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    return isinstance(value, float) and math.isnan(value)


def _plain(value: Any) -> Any:
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if isinstance(value, np.generic):
        return value.item()
    return value


def documents_from_frame(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Rebuild nested documents from dotted columns, dropping missing values."""
    documents: list[dict[str, Any]] = []
    for row in df.to_dict(orient="records"):
        doc: dict[str, Any] = {}
        for key, value in row.items():
            if _is_missing(value):
                continue
            parts = str(key).split(".")
            target = doc
            for part in parts[:-1]:
                target = target.setdefault(part, {})
            target[parts[-1]] = _plain(value)
        documents.append(doc)
    return documents
