"""
Application-wide configuration constants and helper utilities.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class TabConfig:
    key: str
    label: str


# Ordered tab definitions for the dashboard
TABS: List[TabConfig] = [
    TabConfig("overview", "Visão Geral"),
    TabConfig("students", "Estudantes"),
    TabConfig("export", "Exportar"),
    TabConfig("data_quality", "Qualidade dos Dados"),
]

DEFAULT_FALLBACK_DATA_PATH = "data.json"
DEFAULT_REFRESH_INTERVAL_SECONDS = 15 * 60
PDF_STUDENT_LIMIT = 50
STUDENTS_PER_PAGE = 10
ANY_OPTION_LABEL = "Todos"


@dataclass(frozen=True)
class Settings:
    published_csv_url: Optional[str]
    fallback_data_path: str
    spreadsheet_id: Optional[str]
    sheet_name: Optional[str]
    credentials: Optional[str]
    refresh_interval_seconds: int
    log_level: str


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return max(int(raw), 1)
    except ValueError:
        return default


def get_settings() -> Settings:
    """Resolve settings from the environment (populated by bootstrap_env)."""
    return Settings(
        published_csv_url=os.getenv("PUBLISHED_CSV_URL") or None,
        fallback_data_path=os.getenv("FALLBACK_DATA_PATH") or DEFAULT_FALLBACK_DATA_PATH,
        spreadsheet_id=os.getenv("SPREADSHEET_ID") or None,
        sheet_name=os.getenv("SHEET_NAME") or None,
        credentials=os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or None,
        refresh_interval_seconds=_int_env("REFRESH_INTERVAL_SECONDS", DEFAULT_REFRESH_INTERVAL_SECONDS),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic root handler once; later calls only adjust the level."""
    level_name = (level or get_settings().log_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level_name,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        root.setLevel(level_name)
