from __future__ import annotations

import streamlit as st

from config import get_settings
from records.filters import apply_filters
from ui.analytics import render_analytics_page
from ui.compare import render_compare_page
from ui.dashboard import render_dashboard_page
from ui.filter_panel import render_filter_panel
from ui.import_page import render_import_page
from ui.map_page import render_map_page
from ui.state import (
    SOURCE_API,
    SOURCES,
    current_records,
    current_source,
    geocoded_count,
    init_state,
    load_from_api,
)
from ui.theme import apply_theme
from utils.strings import fmt_de, table_label

PAGES = ["Dashboard", "Karten-Ansicht", "Vergleiche", "Analytics", "Datenimport"]
# pages that work on every loaded record, ignoring the sidebar filters
UNFILTERED_PAGES = {"Vergleiche"}


def page_frame(page: str, records, filtered):
    return records if page in UNFILTERED_PAGES else filtered


def _render_status_badge() -> None:
    df = current_records()
    errors = st.session_state.get("ga_errors", [])
    source = current_source()

    left, right = st.columns([0.65, 0.35])
    with left:
        st.caption(f"Quelle: {source} | API: {get_settings().api_url}")
    with right:
        if df is None:
            st.info("Keine Daten geladen")
        elif source == SOURCE_API and errors:
            failed = ", ".join(table_label(e.table) for e in errors)
            st.warning(f"{fmt_de(len(df))} Einträge, fehlgeschlagen: {failed}")
        else:
            st.success(f"{fmt_de(len(df))} Einträge, {fmt_de(geocoded_count(df))} mit Koordinaten")


def _sidebar_nav() -> str:
    st.sidebar.title("GeoAnalytics Pro")

    theme = st.sidebar.selectbox("Darstellung", ["Hell", "Dunkel"], index=0, key="ga_theme")
    apply_theme(theme)

    st.sidebar.radio("Datenquelle", SOURCES, key="ga_source")
    if current_source() == SOURCE_API:
        reload = st.sidebar.button("Neu laden", use_container_width=True)
        if reload or current_records() is None:
            load_from_api()

    return st.sidebar.radio("Navigation", PAGES, index=0)


def main() -> None:
    st.set_page_config(page_title="GeoAnalytics Pro", layout="wide", initial_sidebar_state="expanded")
    init_state()

    page = _sidebar_nav()
    _render_status_badge()

    if page == "Datenimport":
        render_import_page()
        return

    records = current_records()
    if records is None:
        st.info("Noch keine Daten. Über 'Datenimport' eine Datei einlesen oder die Datenbank laden.")
        return

    state = render_filter_panel(records)
    filtered = apply_filters(records, state)

    if page == "Dashboard":
        render_dashboard_page(filtered)
    elif page == "Karten-Ansicht":
        render_map_page(filtered, total=len(records))
    elif page == "Vergleiche":
        render_compare_page(page_frame(page, records, filtered))
    elif page == "Analytics":
        render_analytics_page(filtered)
    else:
        st.error("Unbekannte Seite.")


if __name__ == "__main__":
    main()
