"""
ui/map_page.py

Karten-Ansicht:
- one folium map, one overlay (heatmap / cluster / marker) at a time
- auto-fit to the filtered points until the user pans or zooms
- data table of the filtered set with Excel / CSV / PDF export
- geocoding of records without coordinates, written back through the API
"""

from __future__ import annotations

import logging
from datetime import date, datetime

import pandas as pd
import streamlit as st
from streamlit_folium import st_folium

from api.client import ApiError
from config import get_settings
from geo.geocode import NominatimGeocoder, fill_missing_coords
from map.overlays import (
    OVERLAY_LABELS,
    OverlayKind,
    Viewport,
    ViewportMode,
    heat_weight_from,
    overlay_map,
    padded_bounds,
    visible_points,
)
from records.exchange import export_columns, to_csv_bytes, to_excel_bytes
from records.schema import HAUSNR, LAT, LON, ORT, PLZ, STRASSE, TABLE_COLUMN, has_coords
from records.stats import kw_by_place, summary_stats, top_places
from reports.pdf import make_summary_pdf, summary_rows
from ui.state import SOURCE_API, api_client, current_records, current_source, set_records, viewport_controller
from utils.strings import fmt_de

logger = logging.getLogger(__name__)

MAP_HEIGHT = 600
GEOCODE_BATCH = 25


def _stat_cards(df: pd.DataFrame, total: int) -> None:
    s = summary_stats(df, today=date.today())
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Angezeigt", fmt_de(s["total_entries"]), help=f"von {fmt_de(total)} geladenen Einträgen")
    c2.metric("Mit Koordinaten", fmt_de(s["geocoded"]))
    c3.metric("KW gesamt", fmt_de(s["total_kw"]))
    c4.metric("Top Art", s["top_art"], help=f"{fmt_de(s['top_art_count'])} Einträge")


def _reported_viewport(out) -> Viewport | None:
    if not out:
        return None
    center = out.get("center")
    zoom = out.get("zoom")
    if not center or zoom is None:
        return None
    try:
        return Viewport(center=(float(center["lat"]), float(center["lng"])), zoom=float(zoom))
    except (KeyError, TypeError, ValueError):
        return None


def _render_map(df: pd.DataFrame) -> None:
    controller = viewport_controller()
    kind = OverlayKind(st.session_state.get("ga_overlay", OverlayKind.HEATMAP.value))
    points = visible_points(df)

    top_l, top_r = st.columns([0.75, 0.25])
    with top_l:
        st.caption(
            f"Ansicht: {OVERLAY_LABELS[kind]} | {fmt_de(len(points))} von {fmt_de(len(df))} Einträgen mit Koordinaten"
        )
    with top_r:
        if st.button("Ansicht zurücksetzen", use_container_width=True):
            controller.reset()

    bounds = padded_bounds(points)
    fit_key = tuple(map(tuple, bounds)) if bounds else None
    fit = controller.should_fit(not points.empty, key=fit_key)

    user_view = controller.viewport if controller.mode is ViewportMode.USER_CONTROLLED else None
    map_kwargs = {"heat_weight": heat_weight_from(get_settings().heat_weight)}
    if user_view is not None:
        map_kwargs.update(center=user_view.center, zoom=user_view.zoom)

    with overlay_map(**map_kwargs) as om:
        om.attach(kind, df)
        if fit:
            om.fit(df)
        rendered = Viewport(center=tuple(om.center), zoom=float(om.zoom))
        folium_kwargs = {}
        if user_view is not None:
            folium_kwargs = {"center": list(user_view.center), "zoom": user_view.zoom}
        out = st_folium(
            om.map,
            key="ga_map",
            height=MAP_HEIGHT,
            use_container_width=True,
            returned_objects=["center", "zoom"],
            **folium_kwargs,
        )

    controller.observe(_reported_viewport(out), rendered=rendered)

    if points.empty:
        st.info("Keine Einträge mit Koordinaten. Fehlende Koordinaten können im Tab 'Geokodierung' ermittelt werden.")


def _render_table(df: pd.DataFrame) -> None:
    if df.empty:
        st.info("Keine Datensätze für die aktuelle Auswahl.")
        return

    st.dataframe(df[export_columns(df)], use_container_width=True, hide_index=True, height=480)

    stamp = datetime.now().strftime("%Y%m%d_%H%M")
    c1, c2, c3 = st.columns(3)
    with c1:
        st.download_button(
            "Excel exportieren",
            data=to_excel_bytes(df),
            file_name=f"geoanalytics_{stamp}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            use_container_width=True,
        )
    with c2:
        st.download_button(
            "CSV exportieren",
            data=to_csv_bytes(df),
            file_name=f"geoanalytics_{stamp}.csv",
            mime="text/csv",
            use_container_width=True,
        )
    with c3:
        places = top_places(df, 25).merge(kw_by_place(df, n=len(df)), on="name", how="left")
        pdf = make_summary_pdf(
            "GeoAnalytics Pro: Zusammenfassung",
            summary_rows(summary_stats(df, today=date.today())),
            places,
        )
        st.download_button(
            "PDF-Bericht",
            data=pdf,
            file_name=f"geoanalytics_{stamp}.pdf",
            mime="application/pdf",
            use_container_width=True,
        )


def _write_back(client, failures: list):
    def _on_hit(row: pd.Series, lat: float, lon: float) -> None:
        table = str(row.get(TABLE_COLUMN, "") or "")
        if not table:
            return
        try:
            client.update_coords(
                table,
                plz=str(row.get(PLZ, "")),
                ort=str(row.get(ORT, "")),
                strasse=str(row.get(STRASSE, "")),
                hausnr=str(row.get(HAUSNR, "")),
                latitude=lat,
                longitude=lon,
            )
        except ApiError as exc:
            logger.warning("Coordinate write-back failed for %s: %s", table, exc)
            failures.append(f"{row.get(ORT, '')}, {row.get(STRASSE, '')} {row.get(HAUSNR, '')}: {exc}")

    return _on_hit


def _render_geocoding(df: pd.DataFrame) -> None:
    missing = df[~has_coords(df)] if not df.empty else df
    st.caption(f"{fmt_de(len(missing))} Einträge der aktuellen Auswahl ohne Koordinaten.")
    if missing.empty:
        st.success("Alle Einträge der Auswahl haben Koordinaten.")
        return

    batch = st.number_input("Maximale Anzahl pro Durchlauf", min_value=1, max_value=500, value=GEOCODE_BATCH, step=5)
    write_back = current_source() == SOURCE_API
    if write_back:
        st.caption("Gefundene Koordinaten werden über die API in der Datenbank gespeichert.")

    if not st.button("Fehlende Koordinaten ermitteln", type="primary"):
        return

    todo = missing.head(int(batch))
    progress = st.progress(0.0, text="Geokodierung ...")
    failures: list[str] = []
    on_hit = _write_back(api_client(), failures) if write_back else None

    filled_df, filled = fill_missing_coords(
        todo,
        NominatimGeocoder(),
        on_progress=lambda i, n: progress.progress(i / max(n, 1), text=f"Geokodierung {i}/{n}"),
        on_hit=on_hit,
    )
    progress.empty()

    records = current_records()
    if records is not None and filled:
        records = records.copy()
        records.loc[filled_df.index, [LAT, LON]] = filled_df[[LAT, LON]]
        set_records(records, refit=False)

    st.success(f"{fmt_de(filled)} von {fmt_de(len(todo))} Adressen geokodiert.")
    for msg in failures:
        st.warning(f"Speichern fehlgeschlagen: {msg}")


def render_map_page(df: pd.DataFrame, total: int) -> None:
    st.title("Karten-Ansicht")

    if df is None:
        st.info("Noch keine Daten geladen.")
        return

    _stat_cards(df, total)

    tab_map, tab_table, tab_geo = st.tabs(["Karte", "Datentabelle", "Geokodierung"])
    with tab_map:
        _render_map(df)
    with tab_table:
        _render_table(df)
    with tab_geo:
        _render_geocoding(df)
