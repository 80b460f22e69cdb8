import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_PACKAGE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root
load_dotenv(_PACKAGE_DIR.parent / ".env")


@dataclass(frozen=True)
class IngestionConfig:
    """
    Where listing data is read from and written to.

    Seed files ship with the package; processed files are what the live
    store loads on startup once an ingestion run has produced them.
    """

    seed_data_dir: Path = Path(os.getenv("LISTING_SEED_DIR", str(_PACKAGE_DIR / "data" / "seed")))
    processed_data_dir: Path = Path(
        os.getenv("LISTING_PROCESSED_DIR", str(_PACKAGE_DIR / "data" / "processed"))
    )
    default_status: str = "active"

    def seed_path(self, resource: str) -> Path:
        return self.seed_data_dir / f"{resource}.json"

    def processed_path(self, resource: str) -> Path:
        return self.processed_data_dir / f"{resource}.json"


DEFAULT_INGESTION_CONFIG = IngestionConfig()
