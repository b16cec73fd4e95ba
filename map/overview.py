"""
map/overview.py

Compact place overview for the dashboard using deck.gl via pydeck.

- One circle per Ort at the centroid of its geocoded records
- Circle size driven by record count, color by KW total
"""

from __future__ import annotations

import math

import pandas as pd
import pydeck as pdk
import streamlit as st

from map.overlays import DEFAULT_CENTER
from records.stats import place_aggregates


def _color_scale(series: pd.Series) -> list:
    """3-stop scale: low, mid, high -> RGBA."""
    s = series.fillna(0.0).astype(float)
    if s.empty:
        return []
    q50 = float(s.quantile(0.50))
    q90 = float(s.quantile(0.90))
    colors = []
    for v in s:
        if v <= q50:
            c = [0, 120, 255, 170]
        elif v <= q90:
            c = [80, 200, 120, 170]
        else:
            c = [230, 80, 60, 190]
        colors.append(c)
    return colors


def build_overview_deck(df: pd.DataFrame) -> pdk.Deck | None:
    agg = place_aggregates(df)
    if agg.empty:
        return None

    agg = agg.copy()
    agg["color"] = _color_scale(agg["kw"])
    # 150 m .. ~1.5 km, log-scaled by count
    agg["radius"] = agg["count"].astype(float).map(lambda n: 150.0 + 250.0 * math.log1p(n))
    agg["kw"] = agg["kw"].round(1)

    layer = pdk.Layer(
        "ScatterplotLayer",
        agg,
        pickable=True,
        opacity=0.6,
        stroked=False,
        get_position=["lon", "lat"],
        get_radius="radius",
        radius_min_pixels=4,
        radius_max_pixels=60,
        get_fill_color="color",
        auto_highlight=True,
    )

    view_state = pdk.ViewState(
        latitude=float(agg["lat"].mean()) if len(agg) else DEFAULT_CENTER[0],
        longitude=float(agg["lon"].mean()) if len(agg) else DEFAULT_CENTER[1],
        zoom=9 if len(agg) > 1 else 11,
        pitch=0,
    )

    tooltip = {
        "html": "<b>{Ort}</b><br/>Anschlüsse: {count}<br/>KW gesamt: {kw}",
        "style": {"font-size": "13px"},
    }

    return pdk.Deck(layers=[layer], initial_view_state=view_state, tooltip=tooltip, map_style=None)


def render_overview_map(df: pd.DataFrame) -> None:
    deck = build_overview_deck(df)
    if deck is None:
        st.info("Keine geokodierten Datensätze für die Übersichtskarte.")
        return
    st.pydeck_chart(deck)
    st.caption("Kreisgröße = Anzahl Anschlüsse; Farbe = KW gesamt je Ort.")
