from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Iterable

from ..listings.data_store import replace_store
from ..listings.documents import InvalidDocument, prepare_document
from ..listings.resources import RESOURCES, get_resource
from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from .history import record_run

logger = logging.getLogger(__name__)


def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def _read_seed(name: str, config: IngestionConfig) -> list[Any]:
    path = config.seed_path(name)
    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError(f"{path} does not contain a JSON array")
    return records


def ingest_resource(name: str, config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> dict[str, Any]:
    """
    Ingest one listing type and return its history entry.

    Invalid records are skipped and reported in ``errorList``; the live
    store is replaced only when at least one record survives.
    """
    start = time.time()
    entry: dict[str, Any] = {
        "dataType": name,
        "operation": "import",
        "status": "failed",
        "recordsProcessed": 0,
        "recordsSuccessful": 0,
        "recordsFailed": 0,
        "errorList": [],
        "startTime": _iso(start),
    }

    try:
        records = _read_seed(name, config)
    except (OSError, ValueError) as exc:
        logger.error("Could not read seed data for %s: %s", name, exc)
        entry["errorList"].append({"index": None, "error": str(exc)})
        records = []

    documents: list[dict[str, Any]] = []
    for i, record in enumerate(records):
        try:
            documents.append(prepare_document(record, default_status=config.default_status))
        except InvalidDocument as exc:
            logger.warning("Skipping %s record %d: %s", name, i, exc)
            entry["errorList"].append({"index": i, "error": str(exc)})

    entry["recordsProcessed"] = len(records)
    entry["recordsSuccessful"] = len(documents)
    entry["recordsFailed"] = len(records) - len(documents)

    if documents:
        config.processed_data_dir.mkdir(parents=True, exist_ok=True)
        output_path = config.processed_path(name)
        output_path.write_text(json.dumps(documents, indent=2, ensure_ascii=False), encoding="utf-8")
        replace_store(name, documents)
        entry["outputPath"] = str(output_path)
        entry["status"] = "partial" if entry["recordsFailed"] else "success"

    end = time.time()
    entry["endTime"] = _iso(end)
    entry["duration"] = round((end - start) * 1000, 1)
    record_run(entry)

    logger.info(
        "Ingested %s: %s (%d/%d records)",
        name, entry["status"], entry["recordsSuccessful"], entry["recordsProcessed"],
    )
    return entry


def run_ingestion(
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
    resources: Iterable[str] | None = None,
) -> list[dict[str, Any]]:
    """
    Execute the listing ingestion pipeline.

    Steps:
    - Read the seed JSON for each requested listing type.
    - Normalize records into store-ready documents.
    - Persist them as processed JSON and swap them into the live store.
    """
    names = list(resources) if resources is not None else list(RESOURCES)
    for name in names:
        get_resource(name)
    return [ingest_resource(name, config) for name in names]


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    for result in run_ingestion():
        print(
            f"{result['dataType']}: {result['status']} "
            f"({result['recordsSuccessful']}/{result['recordsProcessed']} records)"
        )
