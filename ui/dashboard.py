from __future__ import annotations

from datetime import date

import pandas as pd
import plotly.express as px
import streamlit as st

from map.overview import render_overview_map
from records.schema import SPARTE
from records.stats import (
    connections_by_type,
    connections_by_year,
    counts_by,
    kw_by_place,
    summary_stats,
    top_places,
)
from ui.theme import CHART_COLORS
from utils.strings import fmt_de


def _stat_cards(df: pd.DataFrame) -> None:
    s = summary_stats(df, today=date.today())
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Einträge", fmt_de(s["total_entries"]))
    c2.metric("Orte", fmt_de(s["unique_orte"]))
    c3.metric("KW gesamt", fmt_de(s["total_kw"]), help=f"Ø {fmt_de(s['avg_kw'], 1)} KW pro Eintrag")
    c4.metric("Top Sparte", s["top_sparte"], help=f"{fmt_de(s['top_sparte_count'])} Einträge")
    c5.metric(f"Einträge {date.today().year}", fmt_de(s["current_year_entries"]))


def render_dashboard_page(df: pd.DataFrame) -> None:
    st.title("Dashboard")
    st.caption("Überblick über die gefilterten Anschlüsse.")

    if df is None or df.empty:
        st.info("Keine Datensätze für die aktuelle Auswahl.")
        return

    _stat_cards(df)
    st.divider()

    left, right = st.columns(2)
    with left:
        st.subheader("Top 10 Orte")
        places = top_places(df, 10)
        if places.empty:
            st.info("Keine Orte vorhanden.")
        else:
            st.bar_chart(places.set_index("name")["value"], color=CHART_COLORS[0])

    with right:
        st.subheader("Verteilung nach Sparte")
        sparten = counts_by(df, SPARTE)
        if sparten.empty:
            st.info("Keine Sparten vorhanden.")
        else:
            fig = px.pie(sparten, names="name", values="value", color_discrete_sequence=CHART_COLORS, hole=0.35)
            fig.update_layout(margin=dict(l=0, r=0, t=10, b=0), height=320)
            st.plotly_chart(fig, use_container_width=True)

    left, right = st.columns(2)
    with left:
        st.subheader("Anschlüsse nach Art")
        types = connections_by_type(df)
        if types.empty:
            st.info("Keine Arten vorhanden.")
        else:
            st.bar_chart(types.head(10).set_index("art")["count"], color=CHART_COLORS[1])

    with right:
        st.subheader("KW-Zahl nach Ort")
        kw = kw_by_place(df, 10)
        if kw.empty or float(kw["kw"].sum()) == 0.0:
            st.info("Keine KW-Angaben vorhanden.")
        else:
            st.bar_chart(kw.set_index("name")["kw"], color=CHART_COLORS[2])

    st.subheader("Zeitverlauf")
    by_year = connections_by_year(df, today=date.today())
    if by_year.empty:
        st.info("Keine gültigen Datumsangaben vorhanden.")
    else:
        st.line_chart(by_year.set_index("year")["count"], color=CHART_COLORS[4])

    st.subheader("Übersichtskarte")
    render_overview_map(df)
