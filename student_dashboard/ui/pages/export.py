from __future__ import annotations

import json
from datetime import datetime
from typing import Sequence

import streamlit as st

from student_dashboard.data.filters import serialize_filters
from student_dashboard.data.metrics import compute_kpis
from student_dashboard.data.schema import StudentRecord
from student_dashboard.reports.export import (
    DEFAULT_REPORT_TITLE,
    build_excel_report,
    build_pdf_report,
    build_summary_payload,
    report_filename,
    students_frame,
)
from student_dashboard.ui.pages.context import PageContext


def _filters_summary(context: PageContext) -> str:
    active = {key: value for key, value in serialize_filters(context.filters).items() if value and value != (None, None)}
    if not active:
        return "Filtros: todos os dados"
    return "Filtros: " + "; ".join(f"{key}={value}" for key, value in active.items())


def render(records: Sequence[StudentRecord], context: PageContext) -> None:
    st.subheader("Exportar")
    st.caption(f"{len(records)} estudantes na visão atual.")

    generated_at = datetime.now()
    kpis = compute_kpis(records, context.as_of)

    col_pdf, col_xlsx, col_csv = st.columns(3)
    with col_pdf:
        st.download_button(
            "📄 Exportar PDF",
            data=build_pdf_report(records, kpis, generated_at, filters_summary=_filters_summary(context)),
            file_name=report_filename(DEFAULT_REPORT_TITLE, generated_at, "pdf"),
            mime="application/pdf",
        )
    with col_xlsx:
        st.download_button(
            "📊 Exportar Excel",
            data=build_excel_report(records, kpis, generated_at),
            file_name=report_filename("relatorio_estudantes", generated_at, "xlsx"),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    with col_csv:
        st.download_button(
            "Baixar CSV",
            data=students_frame(records).to_csv(index=False).encode("utf-8"),
            file_name=report_filename("estudantes", generated_at, "csv"),
            mime="text/csv",
        )

    st.divider()
    st.markdown("#### Resumo")
    summary = build_summary_payload(records, context.as_of, generated_at)
    st.json(summary, expanded=False)
    st.download_button(
        "Baixar resumo (JSON)",
        data=json.dumps(summary, ensure_ascii=False, indent=2).encode("utf-8"),
        file_name=report_filename("resumo_estudantes", generated_at, "json"),
        mime="application/json",
    )
