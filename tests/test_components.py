"""
Unit tests for the display helpers that do not need a running Streamlit session.
"""
from datetime import date, datetime

import pandas as pd
import pytest

from student_dashboard.data.filters import DEFAULT_FILTERS, FilterCriteria
from student_dashboard.data.loader import LoadResult
from student_dashboard.data.metrics import calculate_discipline_progress, calculate_financial_status, compute_kpis
from student_dashboard.data.schema import STATUS_OK, STATUS_PENDING, DisciplineProgress
from student_dashboard.ui.components.charts import bar_chart, financial_frame, progress_frame
from student_dashboard.ui.components.formatting import (
    MISSING,
    format_date,
    format_number,
    format_percent,
    status_icon,
    status_label,
)
from student_dashboard.ui.components.kpi import kpi_cards
from student_dashboard.ui.components import tables
from student_dashboard.ui.components.tables import TABLE_COLUMNS, render_table, students_table
from student_dashboard.ui.pages.context import PageContext
from student_dashboard.ui.pages.export import _filters_summary


class TestFormatting:
    """Tests for the formatting helpers."""

    def test_number_uses_brazilian_separators(self):
        assert format_number(1234567.891, decimals=2) == "1.234.567,89"

    def test_percent(self):
        assert format_percent(66.6666) == "66.7%"
        assert format_percent(None) == MISSING

    def test_date(self):
        assert format_date(date(2024, 1, 5)) == "05/01/2024"

    def test_date_fallback(self):
        assert format_date(None, "Não encontrado") == "Não encontrado"
        assert format_date(None, "") == "N/A"

    @pytest.mark.parametrize(
        "status, label",
        [(STATUS_OK, "OK"), (STATUS_PENDING, "Pendente"), (None, "N/A")],
    )
    def test_status_label(self, status, label):
        assert status_label(status) == label
        assert status_icon(status)


class TestKpiCards:
    def test_cards(self, records, as_of):
        cards = kpi_cards(compute_kpis(records, as_of))
        labels = [card.label for card in cards]
        assert labels[0] == "Total de Alunos"
        assert cards[0].value == 4
        assert "Certificados (30d)" in labels


class TestTables:
    def test_students_table(self, records, as_of):
        df = students_table(records, as_of)
        assert list(df.columns) == TABLE_COLUMNS
        assert list(df["Situação Financeira"]) == ["Em dia", "Quitado", "Inadimplente", "N/A"]
        assert df.loc[3, "Início"] == "Não encontrado"

    def test_empty_table_keeps_columns(self, as_of):
        assert list(students_table((), as_of).columns) == TABLE_COLUMNS

    def test_render_table_only_displays(self, records, as_of, monkeypatch):
        shown = []
        downloads = []
        monkeypatch.setattr(tables.st, "dataframe", lambda df, **kwargs: shown.append(len(df)))
        monkeypatch.setattr(tables.st, "download_button", lambda *args, **kwargs: downloads.append(args))
        render_table(students_table(records[:2], as_of))
        assert shown == [2]
        assert downloads == []


class TestChartFrames:
    def test_financial_frame(self, records, as_of):
        df = financial_frame(calculate_financial_status(records, as_of))
        assert dict(zip(df["Situação"], df["Estudantes"])) == {
            "Em dia": 1,
            "Quitado": 1,
            "Inadimplente": 1,
            "N/A": 1,
        }

    def test_progress_frame_sorted_ascending(self, records):
        df = progress_frame(calculate_discipline_progress(records))
        assert list(df["Progresso Médio (%)"]) == sorted(df["Progresso Médio (%)"])

    def test_progress_frame_empty(self):
        assert progress_frame(DisciplineProgress()).empty

    def test_bar_chart_layout(self):
        df = pd.DataFrame({"Grupo": ["A", "B"], "Valor": [1, 2]})
        fig = bar_chart(df, x="Grupo", y="Valor", title="Título", yaxis_title="Estudantes")
        assert fig.layout.title.text == "Título"
        assert fig.layout.yaxis.title.text == "Estudantes"
        assert fig.layout.xaxis.showgrid is False


class TestExportFiltersSummary:
    """The export tab describes the active filters from the criteria themselves."""

    def _context(self, records, as_of, filters):
        load_result = LoadResult(records=[], source="none", loaded_at=datetime(2024, 6, 15, 9, 0))
        return PageContext(load_result=load_result, records=records, filters=filters, as_of=as_of)

    def test_only_active_filters_are_listed(self, records, as_of):
        context = self._context(records, as_of, FilterCriteria(course="Direito"))
        assert _filters_summary(context) == "Filtros: course=Direito"

    def test_default_filters(self, records, as_of):
        context = self._context(records, as_of, DEFAULT_FILTERS)
        assert _filters_summary(context) == "Filtros: todos os dados"
