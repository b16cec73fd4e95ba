# records/schema.py
#
# Canonical record layout for address/connection rows.
#
# Rows arrive from two sources:
#   - the address tables behind the REST API (one JSON object per row)
#   - the first sheet of an uploaded Excel workbook
#
# Both are normalized into the same DataFrame shape:
#   Geändert am, Zugriffsdatum, Sparte, Ort, PLZ, Strasse, Haus-Nr,
#   "Ort, Strasse Haus-Nr", Datum, Notiz, KW-Zahl, Art, latitude, longitude
# plus any extra source columns, plus the internal "_table" tag.

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

import numpy as np
import pandas as pd

from utils.normalize import as_text, is_missing, safe_float


SPARTE = "Sparte"
ORT = "Ort"
PLZ = "PLZ"
STRASSE = "Strasse"
HAUSNR = "Haus-Nr"
ADDRESS = "Ort, Strasse Haus-Nr"
DATUM = "Datum"
NOTIZ = "Notiz"
KW = "KW-Zahl"
ART = "Art"
LAT = "latitude"
LON = "longitude"
TABLE_COLUMN = "_table"

RECORD_COLUMNS = [
    "Geändert am",
    "Zugriffsdatum",
    SPARTE,
    ORT,
    PLZ,
    STRASSE,
    HAUSNR,
    ADDRESS,
    DATUM,
    NOTIZ,
    KW,
    ART,
    LAT,
    LON,
]

COORD_COLUMNS = [LAT, LON]
TEXT_COLUMNS = [c for c in RECORD_COLUMNS if c not in COORD_COLUMNS]

MIN_YEAR = 1900

_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
_GERMAN_DATE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})")


def _coord(v) -> float:
    s = as_text(v).replace(",", ".")
    if not s:
        return np.nan
    try:
        return float(s)
    except ValueError:
        return np.nan


def _display_address(row: pd.Series) -> str:
    ort = as_text(row.get(ORT))
    street = " ".join(p for p in (as_text(row.get(STRASSE)), as_text(row.get(HAUSNR))) if p)
    if ort and street:
        return f"{ort}, {street}"
    return ort or street


def normalize_records(df: Optional[pd.DataFrame]) -> pd.DataFrame:
    """Normalize a raw record frame into the canonical layout.

    Text fields become stripped strings ("" when missing), coordinates become
    floats (NaN when missing or invalid). Extra columns are kept after the
    canonical ones, "_table" always last.
    """
    if df is None:
        df = pd.DataFrame()
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]

    for col in RECORD_COLUMNS:
        if col not in df.columns:
            df[col] = np.nan

    for col in TEXT_COLUMNS:
        df[col] = df[col].map(as_text).astype(object)

    for col in COORD_COLUMNS:
        df[col] = df[col].map(_coord).astype("float64")

    missing_address = df[ADDRESS] == ""
    if missing_address.any():
        df.loc[missing_address, ADDRESS] = df.loc[missing_address].apply(_display_address, axis=1)

    extras = [c for c in df.columns if c not in RECORD_COLUMNS and c != TABLE_COLUMN]
    ordered = RECORD_COLUMNS + extras
    if TABLE_COLUMN in df.columns:
        df[TABLE_COLUMN] = df[TABLE_COLUMN].map(as_text)
        ordered.append(TABLE_COLUMN)
    return df[ordered].reset_index(drop=True)


def records_from_rows(rows: list[dict], table: Optional[str] = None) -> pd.DataFrame:
    """Rows as returned by GET /api/data/{table} -> normalized frame, optionally tagged."""
    df = pd.DataFrame.from_records(rows) if rows else pd.DataFrame(columns=RECORD_COLUMNS)
    if table is not None:
        df[TABLE_COLUMN] = table
    return normalize_records(df)


def empty_records() -> pd.DataFrame:
    return normalize_records(pd.DataFrame(columns=RECORD_COLUMNS))


# ---------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------
def kw_value(v) -> float:
    """KW-Zahl as number; malformed or missing values count as 0."""
    return safe_float(v, default=0.0)


def kw_series(df: pd.DataFrame) -> pd.Series:
    if df is None or df.empty or KW not in df.columns:
        return pd.Series(dtype="float64")
    return df[KW].map(kw_value).astype("float64")


def record_year(v, today: Optional[date] = None) -> Optional[int]:
    """Year of a Datum value, or None when missing/invalid/out of range."""
    if is_missing(v):
        return None
    year: Optional[int] = None
    if isinstance(v, (pd.Timestamp, datetime, date)):
        year = v.year
    else:
        s = as_text(v)
        if not s:
            return None
        m = _ISO_DATE.match(s)
        g = _GERMAN_DATE.match(s)
        if m:
            year = int(m.group(1))
        elif g:
            year = int(g.group(3))
        else:
            ts = pd.to_datetime(s, errors="coerce", dayfirst=True)
            if pd.isna(ts):
                return None
            year = int(ts.year)
    current = (today or date.today()).year
    if year is None or year < MIN_YEAR or year > current:
        return None
    return int(year)


def year_series(df: pd.DataFrame, today: Optional[date] = None) -> pd.Series:
    """Per-record year (nullable Int64)."""
    if df is None or df.empty or DATUM not in df.columns:
        return pd.Series(dtype="Int64")
    return df[DATUM].map(lambda v: record_year(v, today=today)).astype("Int64")


def has_coords(df: pd.DataFrame) -> pd.Series:
    """Both coordinates present (0/0 counts as missing, as in the source data)."""
    if df is None or df.empty:
        return pd.Series(dtype=bool)
    lat = pd.to_numeric(df[LAT], errors="coerce")
    lon = pd.to_numeric(df[LON], errors="coerce")
    return lat.notna() & lon.notna() & (lat != 0) & (lon != 0)
