from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class QueryConfig:
    max_limit: int = int(os.getenv("LISTING_MAX_LIMIT", "100"))
    default_distance_km: int = int(os.getenv("LISTING_DEFAULT_DISTANCE_KM", "50"))


DEFAULT_QUERY_CONFIG = QueryConfig()
