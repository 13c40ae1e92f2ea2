"""
Layout helpers for the Streamlit application (page setup and sidebar filters).
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence, Tuple

import streamlit as st

from student_dashboard.config import ANY_OPTION_LABEL
from student_dashboard.data.filters import DEFAULT_FILTERS, FilterCriteria
from student_dashboard.data.schema import FilterOptions, StudentRecord

STATE_PREFIX = "sd_filter_"


def setup_page() -> None:
    """Set Streamlit page configuration and top-level styling."""
    st.set_page_config(
        page_title="Dashboard de Estudantes",
        layout="wide",
        page_icon=":mortar_board:",
    )
    _inject_sidebar_primary_button_red()


def _select_option(label: str, key: str, options: Sequence[str], help_text: str) -> Optional[str]:
    choices = [ANY_OPTION_LABEL] + list(options)
    current = st.session_state.get(key, ANY_OPTION_LABEL)
    choice = st.sidebar.selectbox(
        label,
        options=choices,
        index=choices.index(current) if current in choices else 0,
        key=key,
        help=help_text,
    )
    return None if choice == ANY_OPTION_LABEL else choice


def _start_date_bounds(records: Sequence[StudentRecord]) -> Tuple[Optional[date], Optional[date]]:
    dates = [record.start_date for record in records if record.start_date is not None]
    if not dates:
        return None, None
    return min(dates), max(dates)


def _start_date_range_input(records: Sequence[StudentRecord]) -> Tuple[Optional[date], Optional[date]]:
    lowest, highest = _start_date_bounds(records)
    if lowest is None or highest is None:
        return None, None

    enabled = st.sidebar.checkbox("Filtrar por data de início", key=f"{STATE_PREFIX}start_enabled")
    if not enabled:
        return None, None

    col_start, col_end = st.sidebar.columns(2)
    with col_start:
        start = st.date_input(
            "De",
            value=lowest,
            format="DD/MM/YYYY",
            key=f"{STATE_PREFIX}start_from",
        )
    with col_end:
        end = st.date_input(
            "Até",
            value=highest,
            format="DD/MM/YYYY",
            key=f"{STATE_PREFIX}start_to",
        )

    if start > end:
        st.sidebar.warning("A data inicial deve ser anterior ou igual à final. Ajustando o intervalo.")
        start, end = end, start
    return start, end


def sidebar_filters_ui(
    records: Sequence[StudentRecord],
    options: FilterOptions,
    defaults: FilterCriteria = DEFAULT_FILTERS,
) -> FilterCriteria:
    """
    Render the sidebar filter controls and return the selected values.

    Options come from the full dataset so that narrowing one filter never hides
    the values of another.
    """
    st.sidebar.header("Filtros")

    course = _select_option("Curso", f"{STATE_PREFIX}course", options.courses, "Filtrar estudantes por curso.")
    cohort = _select_option("Turma", f"{STATE_PREFIX}cohort", options.cohorts, "Filtrar estudantes por turma.")
    enrollment_status = _select_option(
        "Status",
        f"{STATE_PREFIX}enrollment_status",
        options.enrollment_statuses,
        "Status de inscrição do estudante.",
    )
    certificate_type = _select_option(
        "Tipo de Certificado",
        f"{STATE_PREFIX}certificate_type",
        options.certificate_types,
        "Corresponde ao certificado digital ou impresso.",
    )
    start_date_range = _start_date_range_input(records)

    if st.sidebar.button("Limpar Filtros", key="sd_clear_filters", type="primary"):
        _clear_state_prefixes([STATE_PREFIX])
        st.rerun()

    selected = FilterCriteria(
        course=course,
        cohort=cohort,
        enrollment_status=enrollment_status,
        certificate_type=certificate_type,
        start_date_range=start_date_range,
    )
    return selected if not selected.is_default else defaults


def active_filter_badges(filters: FilterCriteria) -> List[str]:
    badges = []
    if filters.course:
        badges.append(f"Curso: {filters.course}")
    if filters.cohort:
        badges.append(f"Turma: {filters.cohort}")
    if filters.enrollment_status:
        badges.append(f"Status: {filters.enrollment_status}")
    if filters.certificate_type:
        badges.append(f"Certificado: {filters.certificate_type}")
    start, end = filters.start_date_range
    if start is not None and end is not None:
        badges.append(f"Início: {start:%d/%m/%Y} – {end:%d/%m/%Y}")
    return badges


def _clear_state_prefixes(prefixes: List[str]) -> None:
    for prefix in prefixes:
        for key in list(st.session_state.keys()):
            if key.startswith(prefix):
                del st.session_state[key]


def _inject_sidebar_primary_button_red() -> None:
    """Style PRIMARY buttons in the sidebar as red so reset actions stand out."""
    st.markdown(
        """
        <style>
        div[data-testid="stSidebar"] button[kind="primary"],
        div[data-testid="stSidebar"] button[data-testid="baseButton-primary"] {
            background-color: #d33 !important;
            border-color: #d33 !important;
            color: #fff !important;
        }
        div[data-testid="stSidebar"] button[kind="primary"]:hover,
        div[data-testid="stSidebar"] button[data-testid="baseButton-primary"]:hover {
            background-color: #b22 !important;
            border-color: #b22 !important;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )
