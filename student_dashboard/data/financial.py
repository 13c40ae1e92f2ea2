"""
Payment standing of a student, relative to an explicit evaluation date.

One payment is expected per whole calendar month elapsed since the course
start; a student whose paid installments reach that count is current.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from student_dashboard.data.normalization import parse_fraction
from student_dashboard.data.schema import FinancialSituation, StudentRecord


def months_elapsed(start: date, as_of: date) -> int:
    """Whole calendar months from `start` to `as_of` (0 when `as_of` precedes it)."""
    months = (as_of.year - start.year) * 12 + (as_of.month - start.month)
    if as_of.day < start.day:
        months -= 1
    return max(months, 0)


def classify_financial_situation(
    payments_text: Optional[str],
    start_date: Optional[date],
    as_of: date,
) -> FinancialSituation:
    fraction = parse_fraction(payments_text)
    if fraction is None or start_date is None:
        return FinancialSituation.NOT_APPLICABLE

    paid, total = fraction
    if total > 0 and paid >= total:
        return FinancialSituation.PAID_OFF

    # Nothing is due before the course starts
    if start_date > as_of:
        return FinancialSituation.CURRENT

    expected_payments = months_elapsed(start_date, as_of)
    if paid >= expected_payments:
        return FinancialSituation.CURRENT
    return FinancialSituation.DELINQUENT


def record_financial_situation(record: StudentRecord, as_of: date) -> FinancialSituation:
    return classify_financial_situation(record.payments_text, record.start_date, as_of)
