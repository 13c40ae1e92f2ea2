"""
Field normalization: turns raw spreadsheet rows into typed `StudentRecord`s.

Every parser here degrades to an absent marker (None) instead of raising, so a
single malformed cell never blocks the rest of the batch.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import pandas as pd

from student_dashboard.data.schema import (
    COL_COHORT,
    COL_COURSE,
    COL_CPF,
    COL_DIGITAL_REQUEST_DATE,
    COL_DIGITAL_STATUS,
    COL_DIGITAL_TYPE,
    COL_DISCIPLINES,
    COL_DOCUMENTS,
    COL_ENROLLMENT_STATUS,
    COL_EVALUATION,
    COL_FINANCIAL,
    COL_MINIMUM_TIME,
    COL_NAME,
    COL_PAYMENTS,
    COL_PRINTED_REQUEST_DATE,
    COL_PRINTED_STATUS,
    COL_PRINTED_TYPE,
    COL_START_DATE,
    NOT_FOUND,
    NOT_REQUESTED,
    RAW_COLUMNS,
    STATUS_OK,
    STATUS_PENDING,
    StudentRecord,
)

logger = logging.getLogger(__name__)

DMY_REGEX = re.compile(r"(\d{2})/(\d{2})/(\d{4})", re.ASCII)
ISO_REGEX = re.compile(r"\d{4}-\d{2}-\d{2}(?:[T ]\S+)?", re.ASCII)
FRACTION_REGEX = re.compile(r"(\d+)/(\d+)", re.ASCII)
ABSENT_DATE_TOKENS = {NOT_REQUESTED, NOT_FOUND}


def cell_text(value: Any) -> str:
    """Coerce a spreadsheet cell to text; None and NaN become an empty string."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value)


def parse_date(value: Any) -> Optional[date]:
    """Parse DD/MM/YYYY or ISO 8601 text into a date, else None."""
    text = cell_text(value).strip()
    if not text or text in ABSENT_DATE_TOKENS:
        return None

    match = DMY_REGEX.fullmatch(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None

    if not ISO_REGEX.fullmatch(text):
        return None
    parsed = pd.to_datetime(text, format="ISO8601", errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def normalize_status(value: Any) -> Optional[int]:
    """Map "OK" to 1 and "X" to 0 (case-insensitive); anything else is None."""
    token = cell_text(value).strip().lower()
    if token == "ok":
        return STATUS_OK
    if token == "x":
        return STATUS_PENDING
    return None


def parse_fraction(value: Any) -> Optional[Tuple[int, int]]:
    """Return (numerator, denominator) for text shaped exactly like "N/D"."""
    if not isinstance(value, str):
        return None
    match = FRACTION_REGEX.fullmatch(value)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def parse_percentage(value: Any) -> Optional[float]:
    """Convert "N/D" to N / D * 100.

    A zero denominator yields 0.0. Values above 100 are returned as-is.
    """
    fraction = parse_fraction(value)
    if fraction is None:
        return None
    numerator, denominator = fraction
    if denominator == 0:
        return 0.0
    return numerator / denominator * 100


def normalize_record(raw: Mapping[str, Any]) -> StudentRecord:
    text = {column: cell_text(raw.get(column)) for column in RAW_COLUMNS}
    return StudentRecord(
        name=text[COL_NAME],
        cpf=text[COL_CPF],
        course=text[COL_COURSE],
        cohort=text[COL_COHORT],
        enrollment_status=text[COL_ENROLLMENT_STATUS],
        start_date_text=text[COL_START_DATE],
        financial_text=text[COL_FINANCIAL],
        evaluation_text=text[COL_EVALUATION],
        minimum_time_text=text[COL_MINIMUM_TIME],
        documents_text=text[COL_DOCUMENTS],
        disciplines_text=text[COL_DISCIPLINES],
        payments_text=text[COL_PAYMENTS],
        digital_cert_request_text=text[COL_DIGITAL_REQUEST_DATE],
        digital_cert_type=text[COL_DIGITAL_TYPE],
        digital_cert_status=text[COL_DIGITAL_STATUS],
        printed_cert_request_text=text[COL_PRINTED_REQUEST_DATE],
        printed_cert_type=text[COL_PRINTED_TYPE],
        printed_cert_status=text[COL_PRINTED_STATUS],
        start_date=parse_date(raw.get(COL_START_DATE)),
        digital_cert_request_date=parse_date(raw.get(COL_DIGITAL_REQUEST_DATE)),
        printed_cert_request_date=parse_date(raw.get(COL_PRINTED_REQUEST_DATE)),
        financial_status=normalize_status(raw.get(COL_FINANCIAL)),
        evaluation_status=normalize_status(raw.get(COL_EVALUATION)),
        minimum_time_status=normalize_status(raw.get(COL_MINIMUM_TIME)),
        documents_status=normalize_status(raw.get(COL_DOCUMENTS)),
        discipline_progress=parse_percentage(raw.get(COL_DISCIPLINES)),
        payment_progress=parse_percentage(raw.get(COL_PAYMENTS)),
        source=tuple(raw.items()),
    )


def normalize_records(rows: Iterable[Mapping[str, Any]]) -> Tuple[StudentRecord, ...]:
    """Normalize a batch of raw rows; the result is a fresh immutable tuple."""
    records = tuple(normalize_record(row) for row in rows)
    logger.debug("Normalized %d rows", len(records))
    return records


def normalization_diagnostics(records: Iterable[StudentRecord]) -> Dict[str, int]:
    """Count cells that carried text but did not normalize to a typed value."""
    diagnostics = {
        "rows": 0,
        "start_date_unparsed": 0,
        "start_date_missing": 0,
        "status_unrecognized": 0,
        "disciplines_malformed": 0,
        "payments_malformed": 0,
    }
    for record in records:
        diagnostics["rows"] += 1
        start_text = record.start_date_text.strip()
        if record.start_date is None:
            if start_text and start_text not in ABSENT_DATE_TOKENS:
                diagnostics["start_date_unparsed"] += 1
            else:
                diagnostics["start_date_missing"] += 1
        for raw_text, status in (
            (record.financial_text, record.financial_status),
            (record.evaluation_text, record.evaluation_status),
            (record.minimum_time_text, record.minimum_time_status),
            (record.documents_text, record.documents_status),
        ):
            if status is None and raw_text.strip():
                diagnostics["status_unrecognized"] += 1
        if record.discipline_progress is None and record.disciplines_text.strip():
            diagnostics["disciplines_malformed"] += 1
        if record.payment_progress is None and record.payments_text.strip():
            diagnostics["payments_malformed"] += 1
    return diagnostics
