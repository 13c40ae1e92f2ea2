"""
Acquisition of raw enrollment rows.

Sources are tried in order and the first one that yields rows wins:
Google Sheets (service account), the published CSV export, then the local
JSON fallback file. Rows are returned untouched as string-keyed mappings.
"""

from __future__ import annotations

import io
import json
import logging
import os
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

import gspread
import pandas as pd
import requests
import streamlit as st
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials

from student_dashboard.config import Settings, get_settings

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
]
REQUEST_TIMEOUT_SECONDS = 20

RawRow = Dict[str, Any]


class DataSourceError(RuntimeError):
    """Raised by a single source when it cannot produce rows."""


@dataclass
class LoadResult:
    records: List[RawRow]
    source: str
    loaded_at: datetime
    diagnostics: Dict[str, Any] = field(default_factory=dict)


def _strip_cells(df: pd.DataFrame) -> pd.DataFrame:
    df.columns = [str(col).strip() for col in df.columns]
    return df.apply(lambda col: col.str.strip())


def parse_csv_text(text: str) -> Tuple[List[RawRow], Dict[str, Any]]:
    """Parse CSV text into row dicts with every value kept as text.

    Lines with more fields than the header are skipped, as are blank rows.
    """
    skipped: List[str] = []

    def _on_bad_line(fields: List[str]) -> None:
        skipped.append(",".join(fields)[:100])
        return None

    df = pd.read_csv(
        io.StringIO(text),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        on_bad_lines=_on_bad_line,
        engine="python",
    )
    if df.empty:
        return [], {"csv_rows": 0, "skipped_lines": len(skipped)}

    df = _strip_cells(df.fillna(""))
    blank_mask = (df == "").all(axis=1)
    df = df[~blank_mask]
    for line in skipped:
        logger.warning("Skipped malformed CSV line: %r", line)
    diagnostics = {
        "csv_rows": int(len(df)),
        "skipped_lines": len(skipped) + int(blank_mask.sum()),
        "columns": list(df.columns),
    }
    return df.to_dict(orient="records"), diagnostics


def fetch_published_csv(url: str, session: Optional[requests.Session] = None) -> Tuple[List[RawRow], Dict[str, Any]]:
    """Download the published CSV export, bypassing intermediate caches."""
    http = session or requests.Session()
    try:
        response = http.get(
            url,
            params={"t": int(time.time() * 1000)},
            headers={"Cache-Control": "no-cache"},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        raise DataSourceError(f"Published CSV request failed: {exc}") from exc
    response.encoding = response.encoding or "utf-8"
    try:
        return parse_csv_text(response.text)
    except (ValueError, pd.errors.ParserError) as exc:
        raise DataSourceError(f"Published CSV could not be parsed: {exc}") from exc


def fetch_google_sheet(
    spreadsheet_id: str,
    sheet_name: Optional[str],
    credentials_file: str,
) -> Tuple[List[RawRow], Dict[str, Any]]:
    """Read one worksheet through the Sheets API with a service account."""
    if not os.path.exists(credentials_file):
        raise DataSourceError(f"Service account file not found: {credentials_file}")
    try:
        credentials = Credentials.from_service_account_file(credentials_file, scopes=SCOPES)
        client = gspread.authorize(credentials)
        spreadsheet = client.open_by_key(spreadsheet_id)
        worksheet = spreadsheet.worksheet(sheet_name) if sheet_name else spreadsheet.sheet1
        # numericise_ignore keeps "3/12", CPFs and dates as text
        rows = worksheet.get_all_records(numericise_ignore=["all"])
    except (gspread.exceptions.GSpreadException, GoogleAuthError, requests.RequestException, ValueError) as exc:
        raise DataSourceError(f"Google Sheets read failed: {exc}") from exc
    return [dict(row) for row in rows], {"sheet_rows": len(rows), "sheet_name": sheet_name or "sheet1"}


def read_fallback_file(path: str) -> Tuple[List[RawRow], Dict[str, Any]]:
    """Read the local JSON fallback: a list of objects keyed by column label."""
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, ValueError) as exc:
        raise DataSourceError(f"Fallback file unreadable: {path}: {exc}") from exc
    if not isinstance(payload, list) or not all(isinstance(row, dict) for row in payload):
        raise DataSourceError(f"Fallback file must contain a list of objects: {path}")
    return payload, {"fallback_rows": len(payload), "fallback_path": path}


def _sources(settings: Settings) -> List[Tuple[str, Callable[[], Tuple[List[RawRow], Dict[str, Any]]]]]:
    sources = []
    if settings.spreadsheet_id and settings.credentials:
        sources.append((
            "google_sheets",
            lambda: fetch_google_sheet(settings.spreadsheet_id, settings.sheet_name, settings.credentials),
        ))
    if settings.published_csv_url:
        sources.append(("published_csv", lambda: fetch_published_csv(settings.published_csv_url)))
    sources.append(("local_fallback", lambda: read_fallback_file(settings.fallback_data_path)))
    return sources


def fetch_raw_records(settings: Settings) -> LoadResult:
    """Try each configured source in turn; an all-failed load yields no rows."""
    attempts: Dict[str, str] = {}
    for name, fetch in _sources(settings):
        try:
            rows, diagnostics = fetch()
        except DataSourceError as exc:
            logger.warning("Source %s unavailable: %s", name, exc)
            attempts[name] = str(exc)
            continue
        if not rows:
            logger.info("Source %s returned no rows", name)
            attempts[name] = "empty"
            continue
        logger.info("Loaded %d records from %s", len(rows), name)
        diagnostics.update({"source": name, "row_count": len(rows), "failed_sources": attempts})
        return LoadResult(records=rows, source=name, loaded_at=datetime.now(), diagnostics=diagnostics)

    logger.error("No data source produced rows: %s", attempts)
    return LoadResult(
        records=[],
        source="none",
        loaded_at=datetime.now(),
        diagnostics={"source": "none", "row_count": 0, "failed_sources": attempts},
    )


@st.cache_data(show_spinner=False, ttl=get_settings().refresh_interval_seconds)
def _load_data_cached(settings: Settings) -> LoadResult:
    return fetch_raw_records(settings)


def load_data() -> LoadResult:
    """Wrapper that resolves config and calls the cached implementation."""
    return _load_data_cached(get_settings())


def clear_cache() -> None:
    _load_data_cached.clear()  # type: ignore[attr-defined]
