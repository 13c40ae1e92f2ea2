from __future__ import annotations

from typing import List, Sequence

import streamlit as st

from student_dashboard.data.normalization import normalization_diagnostics
from student_dashboard.data.schema import StudentRecord
from student_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from student_dashboard.ui.pages.context import PageContext

DIAGNOSTIC_LABELS = {
    "start_date_unparsed": "Datas de início inválidas",
    "start_date_missing": "Datas de início ausentes",
    "status_unrecognized": "Status não reconhecidos",
    "disciplines_malformed": "Disciplinas mal formatadas",
    "payments_malformed": "Cobranças mal formatadas",
}


def _quality_cards(diagnostics: dict) -> List[KpiCard]:
    rows = diagnostics.get("rows", 0)
    cards = [KpiCard("Linhas normalizadas", rows)]
    for key, label in DIAGNOSTIC_LABELS.items():
        count = diagnostics.get(key, 0)
        share = count / rows * 100 if rows else 0.0
        cards.append(KpiCard(label, count, help_text=f"{share:.1f}% das linhas"))
    return cards


def render(records: Sequence[StudentRecord], context: PageContext) -> None:
    st.subheader("Qualidade dos Dados e Definições")
    if not context.records:
        st.info("Nenhum diagnóstico disponível.")
        return

    diagnostics = normalization_diagnostics(context.records)
    render_kpi_cards(_quality_cards(diagnostics), columns=3)

    st.markdown("#### Origem dos Dados")
    load_diagnostics = context.load_result.diagnostics
    st.write(f"- **Fonte**: {context.load_result.source}")
    st.write(f"- **Carregado em**: {context.load_result.loaded_at:%d/%m/%Y %H:%M:%S}")
    for key, value in load_diagnostics.items():
        if key == "source":
            continue
        st.write(f"- **{key.replace('_', ' ').title()}**: {value}")

    st.markdown("#### Definições das Métricas")
    st.write(
        """
        - **Status dos pilares**: "OK" conta como concluído, "X" como pendente; qualquer outro valor é N/A.
        - **Progresso**: frações "N/D" convertidas em N / D × 100; denominador zero vale 0%.
        - **Situação financeira**: uma cobrança esperada por mês completo desde o início do curso.
          Quitado quando todas as parcelas foram pagas; N/A sem data de início ou sem fração válida.
        - **% Em Dia / % Inadimplentes**: calculados sobre os estudantes com situação diferente de N/A.
        - **Certificados (Nd)**: solicitações com data entre hoje menos N dias e hoje, inclusive.
        """
    )
