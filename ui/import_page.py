from __future__ import annotations

import pandas as pd
import streamlit as st

from geo.geocode import NominatimGeocoder, fill_missing_coords
from records.exchange import ImportFormatError, export_columns, read_upload
from records.schema import has_coords
from ui.state import SOURCE_EXCEL, set_records
from utils.log import log_event
from utils.strings import fmt_de


def _read_files(files) -> pd.DataFrame | None:
    frames = []
    for f in files:
        try:
            frames.append(read_upload(f.name, f.getvalue()))
        except ImportFormatError as exc:
            st.error(f"{f.name}: {exc}")
    frames = [f for f in frames if not f.empty]
    if not frames:
        return None
    return pd.concat(frames, ignore_index=True)


def render_import_page() -> None:
    st.title("Datenimport")
    st.caption("Excel-Arbeitsmappen (.xlsx / .xls) oder CSV (Semikolon) einlesen. Gelesen wird jeweils das erste Blatt.")

    files = st.file_uploader(
        "Dateien auswählen",
        type=["xlsx", "xls", "csv"],
        accept_multiple_files=True,
        key="ga_import_files",
    )
    if not files:
        st.info("Noch keine Datei ausgewählt.")
        return

    df = _read_files(files)
    if df is None:
        st.warning("Die ausgewählten Dateien enthalten keine Datensätze.")
        return

    missing = int((~has_coords(df)).sum())
    c1, c2 = st.columns(2)
    c1.metric("Datensätze", fmt_de(len(df)))
    c2.metric("Ohne Koordinaten", fmt_de(missing))

    st.subheader("Vorschau")
    st.dataframe(df[export_columns(df)].head(100), use_container_width=True, hide_index=True)

    geocode = st.checkbox(
        "Fehlende Koordinaten beim Übernehmen geokodieren",
        value=False,
        disabled=missing == 0,
        help="Nominatim, höchstens eine Anfrage pro Sekunde.",
    )

    if not st.button("Daten übernehmen", type="primary"):
        return

    filled = 0
    if geocode and missing:
        progress = st.progress(0.0, text="Geokodierung ...")
        df, filled = fill_missing_coords(
            df,
            NominatimGeocoder(),
            on_progress=lambda i, n: progress.progress(i / max(n, 1), text=f"Geokodierung {i}/{n}"),
        )
        progress.empty()

    set_records(df, SOURCE_EXCEL)
    log_event("IMPORT", "workbook imported", {"files": [f.name for f in files], "rows": len(df), "geocoded": filled})
    st.success(f"{fmt_de(len(df))} Datensätze übernommen, {fmt_de(filled)} neu geokodiert.")
    st.caption(f"In der Seitenleiste die Datenquelle '{SOURCE_EXCEL}' wählen, um sie anzuzeigen.")
