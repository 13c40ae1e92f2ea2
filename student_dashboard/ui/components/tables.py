"""
Helpers for turning student records into display tables.
"""

from __future__ import annotations

from datetime import date
from typing import Sequence

import pandas as pd
import streamlit as st

from student_dashboard.data.financial import record_financial_situation
from student_dashboard.data.schema import StudentRecord
from student_dashboard.ui.components.formatting import format_date

TABLE_COLUMNS = ["Nome", "CPF", "Curso", "Turma", "Status", "Início", "Situação Financeira"]


def students_table(records: Sequence[StudentRecord], as_of: date) -> pd.DataFrame:
    rows = [
        {
            "Nome": record.name,
            "CPF": record.cpf,
            "Curso": record.course,
            "Turma": record.cohort,
            "Status": record.enrollment_status,
            "Início": format_date(record.start_date, record.start_date_text),
            "Situação Financeira": record_financial_situation(record, as_of).value,
        }
        for record in records
    ]
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def render_table(df: pd.DataFrame, height: int = 400) -> None:
    """Show `df` read-only; downloads live on the Export tab."""
    if df.empty:
        st.info("Nenhum estudante para exibir.")
        return

    st.dataframe(
        df,
        use_container_width=True,
        height=height,
        hide_index=True,
    )
