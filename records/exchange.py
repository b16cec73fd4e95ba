"""
records/exchange.py

Excel / CSV import and export of record sets.

Import reads the first sheet of a workbook with every cell as text so that
postal codes, house numbers and KW values keep their written form. Export
writes one row per record, canonical record columns first, and never
includes the internal "_table" tag.
"""

from __future__ import annotations

import io
from typing import BinaryIO, Union

import pandas as pd

from records.schema import RECORD_COLUMNS, TABLE_COLUMN, normalize_records

SHEET_NAME = "Daten"
CSV_SEPARATOR = ";"
CSV_ENCODING = "utf-8-sig"


class ImportFormatError(ValueError):
    """Uploaded file could not be read as a workbook/CSV."""


def export_columns(df: pd.DataFrame) -> list[str]:
    extras = [c for c in df.columns if c not in RECORD_COLUMNS and c != TABLE_COLUMN and not str(c).startswith("_")]
    return [c for c in RECORD_COLUMNS if c in df.columns] + extras


def _export_frame(df: pd.DataFrame) -> pd.DataFrame:
    df = normalize_records(df)
    return df[export_columns(df)]


def read_workbook(src: Union[str, bytes, BinaryIO]) -> pd.DataFrame:
    """First sheet of an .xlsx/.xls file -> normalized records."""
    if isinstance(src, (bytes, bytearray)):
        src = io.BytesIO(src)
    try:
        raw = pd.read_excel(src, sheet_name=0, dtype=str, keep_default_na=False)
    except Exception as exc:
        raise ImportFormatError(f"Datei konnte nicht gelesen werden: {exc}") from exc
    return normalize_records(raw)


def read_csv(src: Union[str, bytes, BinaryIO]) -> pd.DataFrame:
    if isinstance(src, (bytes, bytearray)):
        src = io.BytesIO(src)
    try:
        raw = pd.read_csv(src, sep=CSV_SEPARATOR, dtype=str, keep_default_na=False, encoding=CSV_ENCODING)
    except Exception as exc:
        raise ImportFormatError(f"CSV konnte nicht gelesen werden: {exc}") from exc
    return normalize_records(raw)


def read_upload(name: str, data: bytes) -> pd.DataFrame:
    if str(name).lower().endswith(".csv"):
        return read_csv(data)
    return read_workbook(data)


def _cells_as_text(ws) -> None:
    # openpyxl stores "=..." strings as formulas; keep them as literal text
    for row in ws.iter_rows():
        for cell in row:
            if isinstance(cell.value, str) and cell.value.startswith("="):
                cell.data_type = "s"


def to_excel_bytes(df: pd.DataFrame, sheet_name: str = SHEET_NAME) -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        _export_frame(df).to_excel(writer, sheet_name=sheet_name, index=False)
        _cells_as_text(writer.sheets[sheet_name])
    return buf.getvalue()


def to_csv_bytes(df: pd.DataFrame) -> bytes:
    return _export_frame(df).to_csv(index=False, sep=CSV_SEPARATOR).encode(CSV_ENCODING)
