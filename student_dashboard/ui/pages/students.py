from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import streamlit as st

from student_dashboard.config import STUDENTS_PER_PAGE
from student_dashboard.data.filters import paginate, search_records
from student_dashboard.data.financial import record_financial_situation
from student_dashboard.data.schema import PILLARS, FinancialSituation, StudentRecord
from student_dashboard.ui.components.formatting import (
    format_date,
    format_percent,
    status_icon,
    status_label,
)
from student_dashboard.ui.components.tables import render_table, students_table
from student_dashboard.ui.pages.context import PageContext

PAGE_STATE_KEY = "sd_students_page"
SEARCH_STATE_KEY = "sd_students_search"


def _progress_value(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    return max(0.0, min(value, 100.0))


def _render_certificate(label: str, cert_type: str, status: str, requested: Optional[date], requested_text: str) -> None:
    with st.container(border=True):
        st.markdown(f"**{label}**")
        col_type, col_status = st.columns(2)
        col_type.caption("Tipo")
        col_type.write(cert_type or "N/A")
        col_status.caption("Status")
        col_status.write(status or "N/A")
        st.caption("Data Solicitação")
        st.write(format_date(requested, requested_text))


def render_student_detail(record: StudentRecord, as_of: date) -> None:
    st.markdown("#### Detalhes do Estudante")

    with st.container(border=True):
        st.markdown("**Informações Básicas**")
        st.write(f"**Nome Completo:** {record.name}")
        st.write(f"**CPF:** `{record.cpf}`")
        col_course, col_cohort = st.columns(2)
        col_course.write(f"**Curso:** {record.course}")
        col_cohort.write(f"**Turma:** {record.cohort}")
        col_status, col_start = st.columns(2)
        col_status.write(f"**Status:** {record.enrollment_status}")
        col_start.write(f"**Data de Início:** {format_date(record.start_date, record.start_date_text)}")

    with st.container(border=True):
        st.markdown("**Status dos Pilares**")
        cols = st.columns(len(PILLARS))
        for col, (attribute, label) in zip(cols, PILLARS.values()):
            status = getattr(record, attribute)
            col.write(f"{label}: {status_icon(status)} {status_label(status)}")

    with st.container(border=True):
        st.markdown("**Progresso Acadêmico**")
        discipline = _progress_value(record.discipline_progress)
        payment = _progress_value(record.payment_progress)
        st.progress(discipline / 100, text=f"Disciplinas: {format_percent(discipline)}")
        st.progress(payment / 100, text=f"Pagamentos: {format_percent(payment)}")
        situation = record_financial_situation(record, as_of)
        if situation in (FinancialSituation.CURRENT, FinancialSituation.PAID_OFF):
            st.success(situation.value)
        elif situation is FinancialSituation.DELINQUENT:
            st.error(situation.value)
        else:
            st.warning(situation.value)

    st.markdown("**Certificados**")
    col_digital, col_printed = st.columns(2)
    with col_digital:
        _render_certificate(
            "Certificado Digital",
            record.digital_cert_type,
            record.digital_cert_status,
            record.digital_cert_request_date,
            record.digital_cert_request_text,
        )
    with col_printed:
        _render_certificate(
            "Certificado Impresso",
            record.printed_cert_type,
            record.printed_cert_status,
            record.printed_cert_request_date,
            record.printed_cert_request_text,
        )


def render(records: Sequence[StudentRecord], context: PageContext) -> None:
    search = st.text_input("Pesquisar por nome ou CPF", key=SEARCH_STATE_KEY)
    matches = search_records(records, search)

    # Jump back to the first page whenever the search term changes
    if st.session_state.get(f"{SEARCH_STATE_KEY}_prev") != search:
        st.session_state[PAGE_STATE_KEY] = 1
    st.session_state[f"{SEARCH_STATE_KEY}_prev"] = search

    st.subheader(f"Estudantes ({len(matches)})")
    if not matches:
        st.info("Nenhum estudante encontrado.")
        return

    page = paginate(matches, st.session_state.get(PAGE_STATE_KEY, 1), STUDENTS_PER_PAGE)
    render_table(students_table(page.items, context.as_of), height=420)

    if page.total_pages > 1:
        col_prev, col_info, col_next = st.columns([1, 3, 1])
        if col_prev.button("◀ Anterior", disabled=page.number == 1, key="sd_students_prev"):
            st.session_state[PAGE_STATE_KEY] = page.number - 1
            st.rerun()
        last_shown = min(page.start_index + STUDENTS_PER_PAGE, page.total_items)
        col_info.caption(
            f"Mostrando {page.start_index + 1} a {last_shown} de {page.total_items} estudantes "
            f"(página {page.number} de {page.total_pages})"
        )
        if col_next.button("Próxima ▶", disabled=page.number == page.total_pages, key="sd_students_next"):
            st.session_state[PAGE_STATE_KEY] = page.number + 1
            st.rerun()

    options = list(range(len(page.items)))
    selected = st.selectbox(
        "Ver detalhes do estudante",
        options=[None] + options,
        format_func=lambda idx: "Selecione..." if idx is None else f"{page.items[idx].name} ({page.items[idx].cpf})",
        key=f"sd_students_detail_{page.number}",
    )
    if selected is not None:
        render_student_detail(page.items[selected], context.as_of)
