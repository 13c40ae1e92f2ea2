"""
Status counters: one card per pillar with OK / pending / N/A tallies.
"""

from __future__ import annotations

from typing import Mapping

import streamlit as st

from student_dashboard.data.schema import PILLARS, StatusMetric
from student_dashboard.ui.components.formatting import format_percent

ROWS = (
    ("ok", "✅ OK"),
    ("error", "❌ Pendente"),
    ("na", "⚠️ N/A"),
)


def render_status_counters(metrics: Mapping[str, StatusMetric]) -> None:
    cols = st.columns(len(PILLARS))
    for col, (pillar, (_, label)) in zip(cols, PILLARS.items()):
        metric = metrics.get(pillar, StatusMetric())
        with col:
            with st.container(border=True):
                st.markdown(f"**{label}**")
                for key, row_label in ROWS:
                    count = metric.counts[key]
                    pct = metric.percentages[key]
                    st.markdown(f"{row_label}: **{count}** · {format_percent(pct)}")
