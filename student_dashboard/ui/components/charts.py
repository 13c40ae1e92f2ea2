"""
Plotly chart factory functions with consistent styling for the dashboard.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from student_dashboard.data.schema import DisciplineProgress, FinancialBreakdown, FinancialSituation

DEFAULT_TEMPLATE = "plotly_white"
SITUATION_COLORS: Dict[str, str] = {
    FinancialSituation.CURRENT.value: "#2ca02c",
    FinancialSituation.PAID_OFF.value: "#1f77b4",
    FinancialSituation.DELINQUENT.value: "#d62728",
    FinancialSituation.NOT_APPLICABLE.value: "#7f7f7f",
}


def _configure_layout(
    fig: go.Figure,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
) -> go.Figure:
    fig.update_layout(
        template=DEFAULT_TEMPLATE,
        title=title,
        margin=dict(l=40, r=20, t=60, b=40),
    )
    if yaxis_title:
        fig.update_yaxes(title=yaxis_title)
    fig.update_xaxes(showgrid=False)
    return fig


def render_plotly(fig: go.Figure) -> None:
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


def bar_chart(
    df: pd.DataFrame,
    x: str,
    y: str,
    orientation: str = "v",
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    hover_data: Optional[List[str]] = None,
    text_auto: bool = False,
) -> go.Figure:
    fig = px.bar(
        df,
        x=x,
        y=y,
        orientation=orientation,
        hover_data=hover_data,
        text_auto=text_auto,
    )
    fig = _configure_layout(fig, title, yaxis_title)
    if text_auto:
        fig.update_traces(textposition="outside", cliponaxis=False)
    return fig


def financial_frame(breakdown: FinancialBreakdown) -> pd.DataFrame:
    rows = [
        {"Situação": situation.value, "Estudantes": breakdown.count_for(situation)}
        for situation in FinancialSituation
    ]
    return pd.DataFrame(rows)


def financial_donut(breakdown: FinancialBreakdown, title: str = "Situação Financeira") -> go.Figure:
    df = financial_frame(breakdown)
    fig = px.pie(
        df,
        names="Situação",
        values="Estudantes",
        hole=0.5,
        color="Situação",
        color_discrete_map=SITUATION_COLORS,
    )
    return _configure_layout(fig, title)


def progress_frame(progress: DisciplineProgress) -> pd.DataFrame:
    rows = [
        {
            "Curso": course,
            "Turma": cohort,
            "Grupo": f"{course} - {cohort}",
            "Progresso Médio (%)": group.average,
            "Estudantes": group.count,
        }
        for (course, cohort), group in progress.by_course_cohort.items()
    ]
    if not rows:
        return pd.DataFrame(columns=["Curso", "Turma", "Grupo", "Progresso Médio (%)", "Estudantes"])
    return pd.DataFrame(rows).sort_values("Progresso Médio (%)", ascending=True)


def progress_by_group_chart(progress: DisciplineProgress) -> go.Figure:
    df = progress_frame(progress)
    fig = bar_chart(
        df,
        x="Progresso Médio (%)",
        y="Grupo",
        orientation="h",
        title="Progresso em Disciplinas por Curso e Turma",
        hover_data=["Estudantes"],
        text_auto=True,
    )
    fig.update_traces(texttemplate="%{x:.1f}%")
    fig.update_layout(height=max(300, 28 * len(df) + 120))
    return fig
