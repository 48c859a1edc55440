"""Configuration for the finance dashboard.

Paths and display defaults live here, each overridable from the environment.
"""
import logging
import os
from pathlib import Path

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("FINCORE_DATA_DIR", _PROJECT_ROOT / "data"))

SEED_PATH = Path(os.getenv("FINCORE_SEED_PATH", DATA_DIR / "seed.json"))


LOG_LEVEL = os.getenv("FINCORE_LOG_LEVEL", "INFO")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_seed_path() -> str:
    return str(SEED_PATH)


def get_log_level() -> int:
    """Resolve the configured level name, falling back to INFO for unknown names."""
    level = logging.getLevelName(LOG_LEVEL.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging() -> None:
    logging.basicConfig(level=get_log_level(), format=LOG_FORMAT)
