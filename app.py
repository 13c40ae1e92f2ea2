import student_dashboard.bootstrap_env  # must be first to set env/secrets
import logging
import time
from datetime import date

import streamlit as st

from student_dashboard.config import TABS, configure_logging
from student_dashboard.data.filters import apply_filters, extract_filter_options
from student_dashboard.data.loader import clear_cache, load_data
from student_dashboard.data.normalization import normalize_records
from student_dashboard.ui.layout import active_filter_badges, setup_page, sidebar_filters_ui
from student_dashboard.ui.pages import data_quality, export, overview, students
from student_dashboard.ui.pages.context import PageContext
from student_dashboard.ui.refresh import auto_refresh, reset_refresh_timer

logger = logging.getLogger(__name__)

PAGE_RENDERERS = {
    "overview": overview.render,
    "students": students.render,
    "export": export.render,
    "data_quality": data_quality.render,
}


def _active_filter_summary(filters, total_rows: int) -> None:
    badges = active_filter_badges(filters)
    summary_text = "Filtros ativos: " + " | ".join(badges) if badges else "Filtros ativos: todos os dados"
    st.markdown(f"**{summary_text}**")
    st.caption(f"Exibindo {total_rows} estudantes após os filtros.")


def main() -> None:
    configure_logging()
    setup_page()
    st.title("Dashboard de Estudantes")

    if st.sidebar.button("🔄 Atualizar Dados"):
        clear_cache()
        reset_refresh_timer(st.session_state, time.monotonic())

    auto_refresh()
    load_result = load_data()
    records = normalize_records(load_result.records)
    options = extract_filter_options(records)

    if st.session_state.get("sd_loaded_at") != load_result.loaded_at:
        st.session_state["sd_loaded_at"] = load_result.loaded_at
        if records:
            st.toast(f"{len(records)} estudantes carregados ({load_result.source})", icon="✅")

    filters = sidebar_filters_ui(records, options)
    filtered = apply_filters(records, filters)

    prev_count = st.session_state.get("sd_prev_filtered_count")
    current_count = len(filtered)
    if prev_count is not None and prev_count != current_count:
        st.toast(f"Filtros aplicados a {current_count} estudantes", icon="🔎")
    st.session_state["sd_prev_filtered_count"] = current_count

    st.sidebar.caption(f"Última atualização: {load_result.loaded_at:%d/%m/%Y %H:%M:%S}")

    if not records:
        logger.warning("Dashboard rendered without data (source=%s)", load_result.source)
        st.warning("Nenhum dado disponível. Verifique a planilha publicada, as credenciais ou o arquivo local.")
        return

    _active_filter_summary(filters, current_count)

    context = PageContext(
        load_result=load_result,
        records=records,
        filters=filters,
        as_of=date.today(),
    )

    tab_labels = [tab.label for tab in TABS]
    streamlit_tabs = st.tabs(tab_labels)

    for streamlit_tab, tab_config in zip(streamlit_tabs, TABS):
        renderer = PAGE_RENDERERS.get(tab_config.key)
        if renderer is None:
            continue
        with streamlit_tab:
            renderer(filtered, context)


if __name__ == "__main__":
    main()
