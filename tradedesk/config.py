from __future__ import annotations
import os
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_DIR / "rendering" / "templates"


def data_dir() -> Path:
    return Path(os.environ.get("TRADEDESK_DATA_DIR") or (ROOT_DIR / "data"))


def exports_dir() -> Path:
    return Path(os.environ.get("TRADEDESK_EXPORTS_DIR") or (ROOT_DIR / "exports"))


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "info").upper()
