"""
ui/state.py

Session state for the Streamlit app.

Keys (all prefixed ``ga_``):
- ga_source     "Datenbank (API)" | "Excel-Import"
- ga_records    record sets by source (None until loaded)
- ga_errors     TableError list of the last load
- ga_overlay    overlay kind value for the map page
- ga_viewport   ViewportController of the map page
- ga_f_*        filter widget values
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import pandas as pd
import streamlit as st

from api.client import ApiClient, ApiError
from config import ALLOWED_TABLES, get_settings
from map.overlays import DEFAULT_OVERLAY, ViewportController
from records.loader import LoadResult, load_tables
from records.schema import has_coords
from utils.strings import table_label

logger = logging.getLogger(__name__)

SOURCE_API = "Datenbank (API)"
SOURCE_EXCEL = "Excel-Import"
SOURCES = [SOURCE_API, SOURCE_EXCEL]

FILTER_KEYS = ("ga_f_orte", "ga_f_arten", "ga_f_sparten", "ga_f_years", "ga_f_kw", "ga_f_search")


def init_state() -> None:
    st.session_state.setdefault("ga_source", SOURCE_API)
    st.session_state.setdefault("ga_records", {SOURCE_API: None, SOURCE_EXCEL: None})
    st.session_state.setdefault("ga_errors", [])
    st.session_state.setdefault("ga_overlay", DEFAULT_OVERLAY.value)
    st.session_state.setdefault("ga_viewport", ViewportController())


def api_client() -> ApiClient:
    settings = get_settings()
    return ApiClient(base_url=settings.api_url, timeout=settings.api_timeout)


def viewport_controller() -> ViewportController:
    return st.session_state["ga_viewport"]


def current_source() -> str:
    return st.session_state.get("ga_source", SOURCE_API)


def current_records(source: Optional[str] = None) -> Optional[pd.DataFrame]:
    return st.session_state["ga_records"].get(source or current_source())


def set_records(df: pd.DataFrame, source: Optional[str] = None, refit: bool = True) -> None:
    st.session_state["ga_records"][source or current_source()] = df
    if not refit:
        return
    # new data set: the map fits to it again
    viewport_controller().reset()


def reset_filters() -> None:
    """Back to the full record set and the default map view (button callback)."""
    for key in FILTER_KEYS:
        st.session_state.pop(key, None)
    st.session_state["ga_overlay"] = DEFAULT_OVERLAY.value


def served_tables(client: ApiClient) -> list[str]:
    """Allow-listed tables the backend reports, in allow-list order."""
    try:
        served = set(client.list_tables())
    except ApiError as exc:
        logger.warning("Table list unavailable, loading the full allow-list: %s", exc)
        return list(ALLOWED_TABLES)
    return [t for t in ALLOWED_TABLES if t in served]


def load_from_api(client: Optional[ApiClient] = None, tables: Optional[Sequence[str]] = None) -> LoadResult:
    """Load every table, then publish the combined set once. Errors become toasts."""
    client = client or api_client()
    if tables is None:
        tables = served_tables(client)
    progress = st.progress(0.0, text="Lade Daten ...")

    def _on_progress(i: int, n: int, table: str) -> None:
        progress.progress((i - 1) / max(n, 1), text=f"Lade {table_label(table)} ({i}/{n})")

    try:
        result = load_tables(client, tables, on_progress=_on_progress)
    finally:
        progress.empty()

    for err in result.errors:
        st.toast(f"Fehler beim Laden von {table_label(err.table)}: {err.message}", icon="⚠️")
    st.toast(result.summary(), icon="✅")

    st.session_state["ga_errors"] = list(result.errors)
    set_records(result.records, SOURCE_API)
    return result


def geocoded_count(df: Optional[pd.DataFrame]) -> int:
    if df is None or df.empty:
        return 0
    return int(has_coords(df).sum())
