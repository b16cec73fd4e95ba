"""
ui/compare.py

Vergleiche: 2-5 Orte, Sparten or source tables side by side.
- Stat cards per item
- Bar chart of record counts
- Radar chart of count / Arten / Sparten, each scaled to its maximum
"""

from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from config import ALLOWED_TABLES
from records.compare import (
    COMPARE_KINDS,
    MAX_COMPARE_ITEMS,
    SelectionLimitError,
    available_items,
    compare_stats,
    radar_frame,
    toggle_item,
)
from ui.theme import CHART_COLORS
from utils.strings import fmt_de


def _selection_key(kind: str) -> str:
    return f"ga_cmp_{kind}"


def _on_toggle(kind: str, item: str) -> None:
    key = _selection_key(kind)
    try:
        st.session_state[key] = toggle_item(st.session_state.get(key, []), item)
    except SelectionLimitError as exc:
        st.session_state[f"ga_cmp_cb_{kind}_{item}"] = False
        st.session_state["ga_cmp_warning"] = str(exc)


def _item_picker(kind: str, items: list[str]) -> list[str]:
    key = _selection_key(kind)
    selected = [s for s in st.session_state.get(key, []) if s in items]
    st.session_state[key] = selected

    warning = st.session_state.pop("ga_cmp_warning", None)
    if warning:
        st.warning(warning)

    cols = st.columns(4)
    for i, item in enumerate(items):
        cb_key = f"ga_cmp_cb_{kind}_{item}"
        st.session_state.setdefault(cb_key, item in selected)
        cols[i % 4].checkbox(
            item,
            key=cb_key,
            on_change=_on_toggle,
            args=(kind, item),
            disabled=item not in selected and len(selected) >= MAX_COMPARE_ITEMS,
        )
    return selected


def _radar(stats: pd.DataFrame) -> go.Figure:
    radar = radar_frame(stats)
    fig = go.Figure()
    subjects = radar["subject"].tolist()
    for i, name in enumerate(stats["name"]):
        values = radar[name].tolist()
        fig.add_trace(
            go.Scatterpolar(
                r=values + values[:1],
                theta=subjects + subjects[:1],
                name=name,
                fill="toself",
                opacity=0.6,
                line=dict(color=CHART_COLORS[i % len(CHART_COLORS)]),
            )
        )
    fig.update_layout(
        polar=dict(radialaxis=dict(visible=True, range=[0, 100])),
        margin=dict(l=30, r=30, t=30, b=30),
        height=420,
    )
    return fig


def render_compare_page(df: pd.DataFrame) -> None:
    st.title("Vergleiche")
    st.caption(f"Bis zu {MAX_COMPARE_ITEMS} Orte, Sparten oder Tabellen aller geladenen Daten gegenüberstellen (ohne Seitenleisten-Filter).")

    if df is None or df.empty:
        st.info("Noch keine Datensätze geladen.")
        return

    kind = st.radio(
        "Vergleichen nach",
        list(COMPARE_KINDS.keys()),
        format_func=COMPARE_KINDS.get,
        horizontal=True,
        key="ga_cmp_kind",
    )

    items = available_items(df, kind, ALLOWED_TABLES)
    if not items:
        st.info("Keine Elemente zum Vergleichen vorhanden.")
        return

    selected = _item_picker(kind, items)
    if len(selected) < 2:
        st.info("Mindestens zwei Elemente auswählen.")
        return

    stats = compare_stats(df, kind, selected, ALLOWED_TABLES)

    cols = st.columns(len(stats))
    for col, (_, row) in zip(cols, stats.iterrows()):
        col.metric(row["name"], fmt_de(row["anzahl"]), help=f"{row['unique_arten']} Arten, {row['unique_sparten']} Sparten")

    left, right = st.columns(2)
    with left:
        st.subheader("Anzahl Einträge")
        st.bar_chart(stats.set_index("name")["anzahl"], color=CHART_COLORS[0])
    with right:
        st.subheader("Profil")
        st.plotly_chart(_radar(stats), use_container_width=True)

    st.dataframe(
        stats.rename(columns={"name": "Name", "anzahl": "Anzahl", "unique_arten": "Arten", "unique_sparten": "Sparten"}),
        use_container_width=True,
        hide_index=True,
    )
