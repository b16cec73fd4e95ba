"""
ui/filter_panel.py

Sidebar filters. Returns the FilterState for the current render.

Slider ranges that cover the whole data range are passed on as ``None``
(no restriction), so undated records stay visible until the user actually
narrows the Baujahr range.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import pandas as pd
import streamlit as st

from map.overlays import OVERLAY_LABELS, OverlayKind
from records.filters import FilterState, filter_options, kw_bounds, year_bounds
from records.schema import ART, ORT, SPARTE
from ui.state import reset_filters


def _prune(key: str, options: Sequence[str]) -> None:
    allowed = set(options)
    st.session_state[key] = [v for v in st.session_state.get(key, []) if v in allowed]


def _clamp(key: str, lo, hi) -> None:
    cur = st.session_state.get(key)
    if not cur:
        st.session_state[key] = (lo, hi)
        return
    a, b = cur
    a = min(max(a, lo), hi)
    b = min(max(b, lo), hi)
    st.session_state[key] = (min(a, b), max(a, b))


def _range_or_none(value: Tuple, bounds: Tuple) -> Optional[Tuple]:
    if value is None or tuple(value) == tuple(bounds):
        return None
    return tuple(value)


def render_filter_panel(df: pd.DataFrame) -> FilterState:
    sb = st.sidebar
    sb.markdown("### Filter")

    orte = filter_options(df, ORT)
    arten = filter_options(df, ART)
    sparten = filter_options(df, SPARTE)
    for key, options in (("ga_f_orte", orte), ("ga_f_arten", arten), ("ga_f_sparten", sparten)):
        _prune(key, options)

    sel_orte = sb.multiselect("Ort", orte, key="ga_f_orte")
    sel_arten = sb.multiselect("Art", arten, key="ga_f_arten")
    sel_sparten = sb.multiselect("Sparte", sparten, key="ga_f_sparten")

    year_range = None
    yb = year_bounds(df)
    if yb and yb[0] < yb[1]:
        _clamp("ga_f_years", *yb)
        year_range = _range_or_none(sb.slider("Baujahr", min_value=yb[0], max_value=yb[1], key="ga_f_years"), yb)

    kw_range = None
    kb = kw_bounds(df)
    if kb and kb[0] < kb[1]:
        kb = (float(kb[0]), float(kb[1]))
        _clamp("ga_f_kw", *kb)
        kw_range = _range_or_none(sb.slider("KW-Zahl", min_value=kb[0], max_value=kb[1], key="ga_f_kw"), kb)

    search = sb.text_input("Adresse suchen", key="ga_f_search", placeholder="Straße, PLZ oder Ort")

    sb.selectbox(
        "Kartenansicht",
        [k.value for k in OverlayKind],
        format_func=lambda v: OVERLAY_LABELS[OverlayKind(v)],
        key="ga_overlay",
    )

    sb.button("Filter zurücksetzen", on_click=reset_filters, use_container_width=True)

    state = FilterState.build(
        orte=sel_orte,
        arten=sel_arten,
        sparten=sel_sparten,
        kw_range=kw_range,
        year_range=year_range,
        search=search,
    )
    if state.is_active:
        sb.caption("Filter aktiv")
    return state
