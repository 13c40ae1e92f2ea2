"""
Filter utilities that apply global dashboard filters to the student records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from student_dashboard.data.schema import NOT_REQUESTED, FilterOptions, StudentRecord

Predicate = Callable[[StudentRecord], bool]


@dataclass(frozen=True)
class FilterCriteria:
    """Selected filter values; None means "any" / open bound."""

    course: Optional[str] = None
    cohort: Optional[str] = None
    enrollment_status: Optional[str] = None
    certificate_type: Optional[str] = None
    start_date_range: Tuple[Optional[date], Optional[date]] = (None, None)

    @property
    def is_default(self) -> bool:
        return self == DEFAULT_FILTERS


DEFAULT_FILTERS = FilterCriteria()


def _field_equals(attribute: str, target: str) -> Predicate:
    return lambda record: getattr(record, attribute) == target


def _certificate_type_matches(target: str) -> Predicate:
    return lambda record: record.digital_cert_type == target or record.printed_cert_type == target


def _start_date_within(start: date, end: date) -> Predicate:
    return lambda record: record.start_date is not None and start <= record.start_date <= end


def build_predicates(criteria: FilterCriteria) -> List[Predicate]:
    """One predicate per active criterion; order does not matter."""
    predicates: List[Predicate] = []
    if criteria.course is not None:
        predicates.append(_field_equals("course", criteria.course))
    if criteria.cohort is not None:
        predicates.append(_field_equals("cohort", criteria.cohort))
    if criteria.enrollment_status is not None:
        predicates.append(_field_equals("enrollment_status", criteria.enrollment_status))
    if criteria.certificate_type is not None:
        predicates.append(_certificate_type_matches(criteria.certificate_type))

    start, end = criteria.start_date_range
    # A half-open range is ignored entirely
    if start is not None and end is not None:
        predicates.append(_start_date_within(start, end))
    return predicates


def apply_filters(records: Iterable[StudentRecord], criteria: FilterCriteria) -> Tuple[StudentRecord, ...]:
    """Return the records that satisfy every active criterion."""
    predicates = build_predicates(criteria)
    return tuple(record for record in records if all(predicate(record) for predicate in predicates))


def _distinct_sorted(values: Iterable[Optional[str]]) -> Tuple[str, ...]:
    return tuple(sorted({value for value in values if value}))


def extract_filter_options(records: Sequence[StudentRecord]) -> FilterOptions:
    """Distinct, non-empty values for each filter control, taken from the full dataset."""
    certificate_types = [record.digital_cert_type for record in records]
    certificate_types += [record.printed_cert_type for record in records]
    return FilterOptions(
        courses=_distinct_sorted(record.course for record in records),
        cohorts=_distinct_sorted(record.cohort for record in records),
        enrollment_statuses=_distinct_sorted(record.enrollment_status for record in records),
        certificate_types=_distinct_sorted(value for value in certificate_types if value != NOT_REQUESTED),
    )


def search_records(records: Sequence[StudentRecord], term: str) -> Tuple[StudentRecord, ...]:
    """Case-insensitive substring match on student name or CPF."""
    needle = (term or "").strip().lower()
    if not needle:
        return tuple(records)
    return tuple(
        record
        for record in records
        if needle in record.name.lower() or needle in record.cpf.lower()
    )


@dataclass(frozen=True)
class Page:
    items: Tuple[StudentRecord, ...]
    number: int
    total_pages: int
    start_index: int
    total_items: int


def paginate(records: Sequence[StudentRecord], page: int, page_size: int) -> Page:
    """Slice one page out of `records`, clamping the page number into range."""
    page_size = max(page_size, 1)
    total_items = len(records)
    total_pages = max((total_items + page_size - 1) // page_size, 1)
    number = max(1, min(page, total_pages))
    start_index = (number - 1) * page_size
    return Page(
        items=tuple(records[start_index:start_index + page_size]),
        number=number,
        total_pages=total_pages,
        start_index=start_index,
        total_items=total_items,
    )


def serialize_filters(criteria: FilterCriteria) -> Dict[str, Any]:
    """
    Convert the FilterCriteria dataclass to a JSON-serialisable dictionary to be
    stored in session_state or printed on exported reports.
    """
    return {
        "course": criteria.course,
        "cohort": criteria.cohort,
        "enrollment_status": criteria.enrollment_status,
        "certificate_type": criteria.certificate_type,
        "start_date_range": tuple(
            value.isoformat() if value is not None else None for value in criteria.start_date_range
        ),
    }
