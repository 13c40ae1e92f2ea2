from __future__ import annotations

from typing import Sequence

import streamlit as st

from student_dashboard.data.metrics import (
    calculate_all_status_metrics,
    calculate_certificate_requests,
    calculate_discipline_progress,
    calculate_financial_status,
    compute_kpis,
)
from student_dashboard.data.schema import StudentRecord
from student_dashboard.ui.components.charts import (
    financial_donut,
    progress_by_group_chart,
    progress_frame,
    render_plotly,
)
from student_dashboard.ui.components.formatting import format_percent
from student_dashboard.ui.components.kpi import kpi_cards, render_kpi_cards
from student_dashboard.ui.components.status import render_status_counters
from student_dashboard.ui.pages.context import PageContext


def render(records: Sequence[StudentRecord], context: PageContext) -> None:
    st.subheader("Visão Geral")
    kpis = compute_kpis(records, context.as_of)
    render_kpi_cards(kpi_cards(kpis))

    if not records:
        st.info("Nenhum estudante corresponde aos filtros selecionados.")
        return

    st.markdown("#### Status dos Pilares")
    render_status_counters(calculate_all_status_metrics(records))

    financial = calculate_financial_status(records, context.as_of)
    progress = calculate_discipline_progress(records)

    col_fin, col_cert = st.columns(2)
    with col_fin:
        render_plotly(financial_donut(financial))
        st.caption(
            f"Em dia (inclui quitados): {format_percent(financial.percent_current)} · "
            f"Inadimplentes: {format_percent(financial.percent_delinquent)} · "
            f"Sem dados: {financial.not_applicable}"
        )
    with col_cert:
        st.markdown("#### Solicitações de Certificado")
        certificates = calculate_certificate_requests(records, context.as_of)
        for days in (7, 30, 90):
            st.metric(
                label=f"Últimos {days} dias",
                value=certificates.total(days),
                help=f"Digital: {certificates.digital.get(days, 0)} · Impresso: {certificates.printed.get(days, 0)}",
            )

    if progress_frame(progress).empty:
        st.info("Sem dados de progresso em disciplinas.")
    else:
        render_plotly(progress_by_group_chart(progress))
