from __future__ import annotations

from pathlib import Path

import pytest

from destination_kolkata.analytics.store import clear_events
from destination_kolkata.data_ingestion.config import IngestionConfig
from destination_kolkata.data_ingestion.history import clear_history
from destination_kolkata.listings.data_store import load_documents, replace_store, reset_stores
from destination_kolkata.listings.resources import RESOURCES


@pytest.fixture(autouse=True)
def seeded_store(tmp_path: Path):
    """Every test starts from the bundled seed data and empty analytics."""
    seed_only = IngestionConfig(processed_data_dir=tmp_path / "no-processed")
    reset_stores()
    for name in RESOURCES:
        replace_store(name, load_documents(name, seed_only))
    clear_events()
    clear_history()
    yield
    reset_stores()
    clear_events()
    clear_history()


def _listing(name: str, **fields) -> dict:
    doc = {
        "name": name,
        "description": f"{name} description",
        "location": {"type": "Point", "coordinates": [88.35, 22.55]},
        "address": {"area": "Park Street", "city": "Kolkata"},
        "rating": {"average": 0.0, "count": 0},
        "status": "active",
    }
    doc.update(fields)
    return doc


@pytest.fixture
def make_listing():
    return _listing
