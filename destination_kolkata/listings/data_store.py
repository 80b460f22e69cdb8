from __future__ import annotations

import json
import logging
import threading
from typing import Any, Iterable, Mapping

import pandas as pd

from ..data_ingestion.config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from .documents import (
    InvalidDocument,
    documents_from_frame,
    frame_from_documents,
    prepare_document,
    slugify,
)
from .pipeline import Stage, check_order
from .resources import get_resource

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when the store cannot execute a query."""


class ListingStore:
    """One listing collection held as a flattened DataFrame."""

    def __init__(self, name: str, documents: Iterable[Mapping[str, Any]] = ()) -> None:
        self.name = name
        self._lock = threading.Lock()
        self._df = frame_from_documents(documents)

    @property
    def frame(self) -> pd.DataFrame:
        return self._df

    def __len__(self) -> int:
        return len(self._df)

    def _run(self, stages: list[Stage]) -> pd.DataFrame:
        check_order(stages)
        df = self._df
        try:
            for stage in stages:
                df = stage.apply(df)
        except Exception as exc:
            raise StoreError(f"query on {self.name} failed: {exc}") from exc
        return df

    def aggregate(self, stages: list[Stage]) -> list[dict[str, Any]]:
        return documents_from_frame(self._run(stages))

    def count(self, stages: list[Stage]) -> int:
        return len(self._run(stages))

    def find_one(self, key: str) -> dict[str, Any] | None:
        """Look a listing up by ``_id`` or slug."""
        df = self._df
        if df.empty:
            return None
        hit = df.loc[(df["_id"] == key) | (df["slug"] == key) | (df["slug"] == slugify(key))]
        if hit.empty:
            return None
        return documents_from_frame(hit.head(1))[0]

    def insert(self, document: Mapping[str, Any]) -> dict[str, Any]:
        prepared = prepare_document(document)
        row = frame_from_documents([prepared])
        with self._lock:
            frames = [f for f in (self._df, row) if not f.empty]
            self._df = pd.concat(frames, ignore_index=True)
        return prepared


# ── Module-level registry ────────────────────────────────────────────────

_stores: dict[str, ListingStore] = {}
_registry_lock = threading.Lock()


def load_documents(
    name: str,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> list[dict[str, Any]]:
    """
    Processed documents when an ingestion run left some, else the seed data.

    Raises ``StoreError`` when the file cannot be read or is not a JSON array.
    """
    path = config.processed_path(name)
    if not path.exists():
        path = config.seed_path(name)
    if not path.exists():
        logger.warning("No data file for %s; starting empty", name)
        return []

    try:
        records = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise StoreError(f"cannot load {name} from {path}: {exc}") from exc
    if not isinstance(records, list):
        raise StoreError(f"{path} does not contain a JSON array")

    documents: list[dict[str, Any]] = []
    for i, record in enumerate(records):
        try:
            documents.append(prepare_document(record, default_status=config.default_status))
        except InvalidDocument as exc:
            logger.warning("Skipping %s record %d: %s", name, i, exc)
    logger.info("Loaded %d %s from %s", len(documents), name, path)
    return documents


def get_store(name: str) -> ListingStore:
    """Return the in-memory store for a listing type, loading it on first call."""
    get_resource(name)
    store = _stores.get(name)
    if store is None:
        with _registry_lock:
            store = _stores.get(name)
            if store is None:
                store = ListingStore(name, load_documents(name))
                _stores[name] = store
    return store


def replace_store(name: str, documents: Iterable[Mapping[str, Any]]) -> ListingStore:
    get_resource(name)
    store = ListingStore(name, [prepare_document(d) for d in documents])
    with _registry_lock:
        _stores[name] = store
    return store


def reset_stores() -> None:
    with _registry_lock:
        _stores.clear()
