"""
Comparison analytics for up to five places, Sparten or source tables.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import pandas as pd

from records.schema import ART, ORT, SPARTE, TABLE_COLUMN
from utils.strings import table_from_label, table_label

COMPARE_KINDS = {
    "orte": "Orte",
    "sparten": "Sparten",
    "tabellen": "Tabellen",
}
MAX_COMPARE_ITEMS = 5
RADAR_METRICS = [("anzahl", "Anzahl"), ("unique_arten", "Arten"), ("unique_sparten", "Sparten")]


class SelectionLimitError(ValueError):
    """Raised when more than MAX_COMPARE_ITEMS items are selected."""


def _distinct(series: pd.Series) -> list[str]:
    s = series.astype(str).str.strip()
    return sorted(s[s != ""].unique().tolist())


def available_items(df: pd.DataFrame, kind: str, tables: Sequence[str]) -> list[str]:
    if kind == "tabellen":
        return [table_label(t) for t in tables]
    if df is None or df.empty:
        return []
    if kind == "orte":
        return _distinct(df[ORT])
    if kind == "sparten":
        return _distinct(df[SPARTE])
    raise ValueError(f"Unknown compare kind: {kind}")


def toggle_item(selected: Sequence[str], item: str, max_items: int = MAX_COMPARE_ITEMS) -> list[str]:
    selected = list(selected)
    if item in selected:
        return [s for s in selected if s != item]
    if len(selected) >= max_items:
        raise SelectionLimitError(f"Maximal {max_items} Elemente vergleichbar")
    return selected + [item]


def _subset(df: pd.DataFrame, kind: str, item: str, tables: Sequence[str]) -> pd.DataFrame:
    if kind == "orte":
        return df[df[ORT] == item]
    if kind == "sparten":
        return df[df[SPARTE] == item]
    if kind == "tabellen":
        if TABLE_COLUMN not in df.columns:
            return df.iloc[0:0]
        return df[df[TABLE_COLUMN] == table_from_label(item, tables)]
    raise ValueError(f"Unknown compare kind: {kind}")


def compare_stats(df: pd.DataFrame, kind: str, items: Iterable[str], tables: Sequence[str] = ()) -> pd.DataFrame:
    """One row per item: name, anzahl, unique_arten, unique_sparten."""
    rows = []
    for item in items:
        sub = _subset(df, kind, item, tables)
        arten = sub[ART].astype(str)
        rows.append(
            {
                "name": item,
                "anzahl": int(len(sub)),
                "unique_arten": int(arten[(arten != "NaN") & (arten != "")].nunique()),
                "unique_sparten": int(sub[SPARTE].nunique()) if kind != "sparten" else 1,
            }
        )
    return pd.DataFrame(rows, columns=["name", "anzahl", "unique_arten", "unique_sparten"])


def radar_frame(stats: pd.DataFrame) -> pd.DataFrame:
    """subject x item matrix, every metric scaled to 0..100 of its maximum."""
    if stats is None or stats.empty:
        return pd.DataFrame(columns=["subject"])
    rows = []
    for col, subject in RADAR_METRICS:
        peak = float(stats[col].max())
        row = {"subject": subject}
        for _, r in stats.iterrows():
            row[r["name"]] = (float(r[col]) / peak) * 100.0 if peak > 0 else 0.0
        rows.append(row)
    return pd.DataFrame(rows)
