from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import streamlit as st

from student_dashboard.data.schema import KPIs
from student_dashboard.ui.components.formatting import format_number, format_percent


@dataclass
class KpiCard:
    label: str
    value: Optional[float] = None
    value_display: Optional[str] = None
    decimals: int = 0
    is_percent: bool = False
    help_text: Optional[str] = None


def _format_value(card: KpiCard) -> str:
    if card.value_display is not None:
        return card.value_display
    if card.is_percent:
        return format_percent(card.value, decimals=card.decimals)
    return format_number(card.value, decimals=card.decimals)


def kpi_cards(kpis: KPIs) -> List[KpiCard]:
    return [
        KpiCard("Total de Alunos", kpis.total_students),
        KpiCard(
            "% Em Dia",
            kpis.percent_current,
            decimals=1,
            is_percent=True,
            help_text=f"Inadimplentes: {format_percent(kpis.percent_delinquent)}",
        ),
        KpiCard("Progresso Médio", kpis.avg_discipline_progress, decimals=1, is_percent=True),
        KpiCard("Docs Completos", kpis.percent_documents_ok, decimals=1, is_percent=True),
        KpiCard(
            "Certificados (30d)",
            kpis.cert_requests_30d,
            help_text=f"7d: {kpis.cert_requests_7d} · 90d: {kpis.cert_requests_90d}",
        ),
    ]


def render_kpi_cards(cards: Sequence[KpiCard], columns: int = 5) -> None:
    """
    Render KPI cards in a responsive grid using Streamlit columns.
    """
    cards = list(cards)
    if not cards:
        st.info("KPIs indisponíveis para os filtros atuais.")
        return

    columns = max(columns, 1)
    for idx in range(0, len(cards), columns):
        row_cards = cards[idx: idx + columns]
        cols = st.columns(len(row_cards))
        for col, card in zip(cols, row_cards):
            with col:
                st.metric(label=card.label, value=_format_value(card))
                if card.help_text:
                    st.caption(card.help_text)
