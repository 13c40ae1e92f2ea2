"""
Unit tests for filtering, filter options, search and pagination.
"""
from datetime import date

import pytest

from student_dashboard.data.filters import (
    DEFAULT_FILTERS,
    FilterCriteria,
    apply_filters,
    build_predicates,
    extract_filter_options,
    paginate,
    search_records,
    serialize_filters,
)
from student_dashboard.data.normalization import normalize_records

from conftest import make_row


def _names(records):
    return [record.name for record in records]


class TestApplyFilters:
    """Tests for apply_filters."""

    def test_default_criteria_keep_everything(self, records):
        assert apply_filters(records, DEFAULT_FILTERS) == records
        assert build_predicates(DEFAULT_FILTERS) == []

    def test_course_only(self, records):
        result = apply_filters(records, FilterCriteria(course="Engenharia"))
        assert all(record.course == "Engenharia" for record in result)
        assert len(result) <= len(records)
        assert _names(result) == ["Ana Souza", "Carla Dias", "Diego Melo"]

    def test_idempotent(self, records):
        criteria = FilterCriteria(course="Engenharia", cohort="2023B")
        once = apply_filters(records, criteria)
        assert apply_filters(once, criteria) == once

    def test_criteria_combine_with_and(self, records):
        criteria = FilterCriteria(course="Engenharia", enrollment_status="Bloqueada")
        assert _names(apply_filters(records, criteria)) == ["Carla Dias"]

    def test_order_of_application_does_not_matter(self, records):
        by_course = apply_filters(apply_filters(records, FilterCriteria(course="Engenharia")), FilterCriteria(cohort="2023B"))
        by_cohort = apply_filters(apply_filters(records, FilterCriteria(cohort="2023B")), FilterCriteria(course="Engenharia"))
        assert by_course == by_cohort == apply_filters(records, FilterCriteria(course="Engenharia", cohort="2023B"))

    @pytest.mark.parametrize(
        "certificate_type, expected",
        [("Conclusão", ["Bruno Lima"]), ("Histórico", ["Carla Dias"]), ("Inexistente", [])],
    )
    def test_certificate_type_matches_either_certificate(self, records, certificate_type, expected):
        result = apply_filters(records, FilterCriteria(certificate_type=certificate_type))
        assert _names(result) == expected

    def test_start_date_range_is_inclusive(self, records):
        criteria = FilterCriteria(start_date_range=(date(2023, 8, 15), date(2024, 1, 15)))
        assert _names(apply_filters(records, criteria)) == ["Ana Souza", "Carla Dias"]

    def test_start_date_range_excludes_missing_dates(self, records):
        criteria = FilterCriteria(start_date_range=(date(2000, 1, 1), date(2100, 1, 1)))
        assert "Diego Melo" not in _names(apply_filters(records, criteria))

    @pytest.mark.parametrize("bounds", [(date(2024, 1, 1), None), (None, date(2024, 1, 1))])
    def test_half_open_range_is_ignored(self, records, bounds):
        assert apply_filters(records, FilterCriteria(start_date_range=bounds)) == records

    def test_input_is_untouched(self, records):
        snapshot = tuple(records)
        apply_filters(records, FilterCriteria(course="Direito"))
        assert records == snapshot

    def test_is_default(self):
        assert DEFAULT_FILTERS.is_default
        assert not FilterCriteria(cohort="2024A").is_default


class TestExtractFilterOptions:
    """Tests for extract_filter_options."""

    def test_dedupes_drops_blanks_and_sorts(self):
        rows = [make_row(columns={"Curso": value}) for value in ("B", "A", "A", "", None)]
        options = extract_filter_options(normalize_records(rows))
        assert options.courses == ("A", "B")

    def test_fixture_options(self, records):
        options = extract_filter_options(records)
        assert options.courses == ("Direito", "Engenharia")
        assert options.cohorts == ("2023B", "2024A")
        assert options.enrollment_statuses == ("Bloqueada", "Cursando", "Formado", "Trancada")
        assert options.certificate_types == ("Conclusão", "Histórico")

    def test_empty(self):
        options = extract_filter_options(())
        assert options.to_dict() == {
            "courses": [],
            "cohorts": [],
            "enrollment_statuses": [],
            "certificate_types": [],
        }


class TestSearchRecords:
    """Tests for search_records."""

    def test_name_is_case_insensitive(self, records):
        assert _names(search_records(records, "ANA")) == ["Ana Souza"]

    def test_cpf(self, records):
        assert _names(search_records(records, "987.654")) == ["Bruno Lima"]

    @pytest.mark.parametrize("term", ["", "   ", None])
    def test_blank_term_keeps_everything(self, records, term):
        assert search_records(records, term) == tuple(records)


class TestPaginate:
    """Tests for paginate."""

    @pytest.fixture
    def many(self):
        return normalize_records(make_row(columns={"Nome": f"Aluno {idx:02d}"}) for idx in range(25))

    def test_first_page(self, many):
        page = paginate(many, 1, 10)
        assert page.total_pages == 3
        assert len(page.items) == 10
        assert page.items[0].name == "Aluno 00"

    def test_last_page_is_partial(self, many):
        page = paginate(many, 3, 10)
        assert len(page.items) == 5
        assert page.start_index == 20

    @pytest.mark.parametrize("requested, expected", [(0, 1), (-3, 1), (9, 3)])
    def test_page_number_is_clamped(self, many, requested, expected):
        assert paginate(many, requested, 10).number == expected

    def test_empty(self):
        page = paginate((), 1, 10)
        assert page.items == ()
        assert page.total_pages == 1
        assert page.total_items == 0


def test_serialize_filters():
    criteria = FilterCriteria(course="Direito", start_date_range=(date(2024, 1, 1), None))
    assert serialize_filters(criteria) == {
        "course": "Direito",
        "cohort": None,
        "enrollment_status": None,
        "certificate_type": None,
        "start_date_range": ("2024-01-01", None),
    }
