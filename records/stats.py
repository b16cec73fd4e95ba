"""
records/stats.py

Derived statistics over the (filtered) record set.

Everything here is a pure function of the frame it receives: nothing is
cached or persisted, pages recompute on every filter change. Malformed
KW-Zahl values count as 0, records without a valid Datum are left out of
year-based figures.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Tuple

import pandas as pd

from records.schema import ART, ORT, SPARTE, has_coords, kw_series, year_series
from utils.strings import truncate


def _clean(series: pd.Series) -> pd.Series:
    s = series.astype(str).str.strip()
    return s[(s != "") & (s.str.upper() != "NAN")]


def mode_of(series: pd.Series) -> Tuple[str, int]:
    """Most frequent value and its count. Ties go to the value seen first."""
    if series is None or series.empty:
        return "N/A", 0
    s = _clean(series)
    if s.empty:
        return "N/A", 0
    counts = s.value_counts(sort=False)
    best = counts.max()
    for value in s:
        if counts[value] == best:
            return str(value), int(best)
    return "N/A", 0


def counts_by(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """name/value counts, descending."""
    if df is None or df.empty or column not in df.columns:
        return pd.DataFrame(columns=["name", "value"])
    s = _clean(df[column])
    out = s.value_counts().rename_axis("name").reset_index(name="value")
    return out


def summary_stats(df: pd.DataFrame, today: Optional[date] = None) -> Dict[str, Any]:
    total = int(len(df)) if df is not None else 0
    if not total:
        return {
            "total_entries": 0,
            "unique_orte": 0,
            "total_kw": 0.0,
            "avg_kw": 0.0,
            "top_sparte": "N/A",
            "top_sparte_count": 0,
            "top_art": "N/A",
            "top_art_count": 0,
            "current_year_entries": 0,
            "sparten_count": 0,
            "geocoded": 0,
        }

    kw = kw_series(df)
    total_kw = float(kw.sum())
    top_sparte, top_sparte_count = mode_of(df[SPARTE])
    top_art, top_art_count = mode_of(df[ART])
    current_year = (today or date.today()).year
    years = year_series(df, today=today)

    return {
        "total_entries": total,
        "unique_orte": int(df[ORT].nunique()),
        "total_kw": total_kw,
        "avg_kw": total_kw / max(total, 1),
        "top_sparte": top_sparte,
        "top_sparte_count": top_sparte_count,
        "top_art": top_art,
        "top_art_count": top_art_count,
        "current_year_entries": int((years == current_year).fillna(False).sum()),
        "sparten_count": int(_clean(df[SPARTE]).nunique()),
        "geocoded": int(has_coords(df).sum()),
    }


def analytics_stats(df: pd.DataFrame) -> Dict[str, int]:
    total = int(len(df)) if df is not None else 0
    if not total:
        return {"total_connections": 0, "unique_locations": 0, "geo_data_count": 0, "avg_per_location": 0}
    unique = int(df[ORT].nunique())
    return {
        "total_connections": total,
        "unique_locations": unique,
        "geo_data_count": int(has_coords(df).sum()),
        "avg_per_location": int(round(total / unique)) if unique else 0,
    }


def connections_by_year(
    df: pd.DataFrame,
    year_range: Optional[Tuple[int, int]] = None,
    today: Optional[date] = None,
) -> pd.DataFrame:
    """year/count, ascending; records without a valid year are skipped."""
    if df is None or df.empty:
        return pd.DataFrame(columns=["year", "count"])
    years = year_series(df, today=today).dropna().astype(int)
    if year_range is not None:
        years = years[(years >= year_range[0]) & (years <= year_range[1])]
    if years.empty:
        return pd.DataFrame(columns=["year", "count"])
    out = years.value_counts().sort_index().rename_axis("year").reset_index(name="count")
    return out


def connections_by_type(df: pd.DataFrame, label_len: int = 20) -> pd.DataFrame:
    """art (shortened label)/full_art/count, by count descending."""
    counts = counts_by(df, ART)
    if counts.empty:
        return pd.DataFrame(columns=["art", "full_art", "count"])
    return pd.DataFrame(
        {
            "art": counts["name"].map(lambda s: truncate(s, label_len)),
            "full_art": counts["name"],
            "count": counts["value"].astype(int),
        }
    )


def top_places(df: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    return counts_by(df, ORT).head(n).reset_index(drop=True)


def kw_by_place(df: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    if df is None or df.empty:
        return pd.DataFrame(columns=["name", "kw"])
    tmp = pd.DataFrame({"name": df[ORT].astype(str), "kw": kw_series(df)})
    out = (
        tmp.groupby("name", sort=False)["kw"]
        .sum()
        .sort_values(ascending=False, kind="stable")
        .head(n)
        .round()
        .reset_index()
    )
    return out


def place_aggregates(df: pd.DataFrame) -> pd.DataFrame:
    """Per-place count, KW total and coordinate centroid (geocoded records only)."""
    cols = ["Ort", "count", "kw", "lat", "lon"]
    if df is None or df.empty:
        return pd.DataFrame(columns=cols)
    geo = df[has_coords(df)]
    if geo.empty:
        return pd.DataFrame(columns=cols)
    tmp = pd.DataFrame(
        {
            "Ort": geo[ORT].astype(str),
            "kw": kw_series(geo),
            "lat": geo["latitude"].astype(float),
            "lon": geo["longitude"].astype(float),
        }
    )
    out = tmp.groupby("Ort").agg(count=("kw", "size"), kw=("kw", "sum"), lat=("lat", "mean"), lon=("lon", "mean"))
    return out.reset_index()[cols].sort_values("count", ascending=False).reset_index(drop=True)
