"""
Utility helpers for formatting numbers, percentages, dates, and pillar statuses.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from student_dashboard.data.schema import STATUS_OK, STATUS_PENDING

MISSING = "–"
DATE_DISPLAY = "%d/%m/%Y"


def format_number(value: Optional[float], decimals: int = 0) -> str:
    if value is None:
        return MISSING
    try:
        formatted = f"{value:,.{decimals}f}"
    except (TypeError, ValueError):
        return MISSING
    # pt-BR separators: 1.234,5
    return formatted.replace(",", "_").replace(".", ",").replace("_", ".")


def format_percent(value: Optional[float], decimals: int = 1) -> str:
    if value is None:
        return MISSING
    try:
        return f"{value:.{decimals}f}%"
    except (TypeError, ValueError):
        return MISSING


def format_date(value: Optional[date], fallback: str = "N/A") -> str:
    if value is None:
        return fallback or "N/A"
    return value.strftime(DATE_DISPLAY)


def status_label(status: Optional[int]) -> str:
    if status == STATUS_OK:
        return "OK"
    if status == STATUS_PENDING:
        return "Pendente"
    return "N/A"


def status_icon(status: Optional[int]) -> str:
    if status == STATUS_OK:
        return "✅"
    if status == STATUS_PENDING:
        return "❌"
    return "⚠️"
