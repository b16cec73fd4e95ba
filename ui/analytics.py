from __future__ import annotations

from datetime import date

import pandas as pd
import plotly.express as px
import streamlit as st

from records.filters import year_bounds
from records.stats import analytics_stats, connections_by_type, connections_by_year
from ui.theme import CHART_COLORS
from utils.strings import fmt_de


def _year_tiles(by_year: pd.DataFrame, per_row: int = 6) -> None:
    rows = by_year.sort_values("year", ascending=False).reset_index(drop=True)
    for start in range(0, len(rows), per_row):
        cols = st.columns(per_row)
        for col, (_, r) in zip(cols, rows.iloc[start:start + per_row].iterrows()):
            col.metric(str(int(r["year"])), fmt_de(r["count"]))


def render_analytics_page(df: pd.DataFrame) -> None:
    st.title("Analytics")

    if df is None or df.empty:
        st.info("Keine Datensätze für die aktuelle Auswahl.")
        return

    s = analytics_stats(df)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Anschlüsse", fmt_de(s["total_connections"]))
    c2.metric("Standorte", fmt_de(s["unique_locations"]))
    c3.metric("Mit Geodaten", fmt_de(s["geo_data_count"]))
    c4.metric("Ø pro Standort", fmt_de(s["avg_per_location"]))

    bounds = year_bounds(df)
    year_range = None
    if bounds and bounds[0] < bounds[1]:
        year_range = st.slider("Zeitraum", min_value=bounds[0], max_value=bounds[1], value=bounds, key=f"ga_an_years_{bounds[0]}_{bounds[1]}")

    by_year = connections_by_year(df, year_range=year_range, today=date.today())

    left, right = st.columns(2)
    with left:
        st.subheader("Anschlüsse pro Jahr")
        if by_year.empty:
            st.info("Keine gültigen Datumsangaben vorhanden.")
        else:
            st.line_chart(by_year.set_index("year")["count"], color=CHART_COLORS[0])

    with right:
        st.subheader("Anschlüsse nach Art")
        types = connections_by_type(df)
        if types.empty:
            st.info("Keine Arten vorhanden.")
        else:
            fig = px.pie(
                types,
                names="art",
                values="count",
                hover_name="full_art",
                color_discrete_sequence=CHART_COLORS,
            )
            fig.update_layout(margin=dict(l=0, r=0, t=10, b=0), height=340)
            st.plotly_chart(fig, use_container_width=True)

    if not by_year.empty:
        st.subheader("Jahresübersicht")
        _year_tiles(by_year)
