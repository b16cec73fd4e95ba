# db/core.py
# =============================================================================
# Address store access
#
# Public entrypoints:
#
#     ensure_store_schema(con, tables)   create missing address tables
#     fetch_table(con, table, limit)     bounded read as JSON-ready rows
#     update_coords(con, table, ...)     coordinate fill-in by compound key
#     insert_records(con, table, df)     bulk load (seeding / tests)
#
# Table names are always quoted identifiers; values are bound parameters.
# Whitelisting happens one level up (api/server.py).
# =============================================================================

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

import duckdb
import pandas as pd

from config import ROW_LIMIT
from records.schema import COORD_COLUMNS, RECORD_COLUMNS


# -------------------------------------------------------------------------
# Utility
# -------------------------------------------------------------------------
def quote_ident(name: str) -> str:
    return '"' + str(name).replace('"', '""') + '"'


def table_ref(table: str, catalog: Optional[str] = None) -> str:
    if catalog:
        return f"{catalog}.{quote_ident(table)}"
    return quote_ident(table)


def table_exists(con: duckdb.DuckDBPyConnection, name: str, catalog: Optional[str] = None) -> bool:
    if catalog:
        sql = """
            SELECT COUNT(*)
            FROM information_schema.tables
            WHERE table_catalog = ? AND table_name = ?
        """
        return bool(con.execute(sql, [catalog, name]).fetchone()[0])
    sql = """
        SELECT COUNT(*)
        FROM information_schema.tables
        WHERE table_name = ?
    """
    return bool(con.execute(sql, [name]).fetchone()[0])


# -------------------------------------------------------------------------
# Schema
# -------------------------------------------------------------------------
def _column_ddl() -> str:
    cols = []
    for c in RECORD_COLUMNS:
        sql_type = "DOUBLE" if c in COORD_COLUMNS else "VARCHAR"
        cols.append(f"{quote_ident(c)} {sql_type}")
    return ",\n                ".join(cols)


def ensure_store_schema(
    con: duckdb.DuckDBPyConnection,
    tables: Sequence[str],
    catalog: Optional[str] = None,
) -> List[str]:
    """
    Create any missing address table. SAFE to call repeatedly.
    Returns the tables that were created.
    """
    created = []
    for table in tables:
        if table_exists(con, table, catalog):
            continue
        con.execute(
            f"""
            CREATE TABLE {table_ref(table, catalog)} (
                {_column_ddl()}
            )
            """
        )
        created.append(table)
    return created


# -------------------------------------------------------------------------
# Reads
# -------------------------------------------------------------------------
def _json_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    # to_json maps NaN/NaT to null and timestamps to ISO strings
    if df.empty:
        return []
    return json.loads(df.to_json(orient="records", date_format="iso", force_ascii=False))


def fetch_table(
    con: duckdb.DuckDBPyConnection,
    table: str,
    limit: int = ROW_LIMIT,
    catalog: Optional[str] = None,
) -> List[Dict[str, Any]]:
    df = con.execute(f"SELECT * FROM {table_ref(table, catalog)} LIMIT {int(limit)}").fetchdf()
    return _json_rows(df)


def table_columns(
    con: duckdb.DuckDBPyConnection,
    table: str,
    catalog: Optional[str] = None,
) -> pd.DataFrame:
    """name/type/notnull/pk of every column (db_inspect)."""
    df = con.execute(f"PRAGMA table_info({_pragma_arg(table, catalog)})").fetchdf()
    return df[["name", "type", "notnull", "pk"]]


def _pragma_arg(table: str, catalog: Optional[str]) -> str:
    ident = table.replace("'", "''")
    if catalog:
        return f"'{catalog}.{ident}'"
    return f"'{ident}'"


# -------------------------------------------------------------------------
# Writes
# -------------------------------------------------------------------------
def update_coords(
    con: duckdb.DuckDBPyConnection,
    table: str,
    plz: str,
    ort: str,
    strasse: str,
    hausnr: str,
    latitude: float,
    longitude: float,
    catalog: Optional[str] = None,
) -> int:
    """Set coordinates on every row matching (PLZ, Ort, Strasse, Haus-Nr). Returns row count."""
    row = con.execute(
        f"""
        UPDATE {table_ref(table, catalog)}
        SET latitude = ?, longitude = ?
        WHERE CAST("PLZ" AS VARCHAR) = ?
          AND CAST("Ort" AS VARCHAR) = ?
          AND CAST("Strasse" AS VARCHAR) = ?
          AND CAST("Haus-Nr" AS VARCHAR) = ?
        """,
        [float(latitude), float(longitude), str(plz), str(ort), str(strasse), str(hausnr)],
    ).fetchone()
    return int(row[0]) if row else 0


def insert_records(
    con: duckdb.DuckDBPyConnection,
    table: str,
    df: pd.DataFrame,
    catalog: Optional[str] = None,
) -> int:
    """Append the record columns of df to an existing address table."""
    if df is None or df.empty:
        return 0
    frame = df[[c for c in RECORD_COLUMNS if c in df.columns]].copy()
    cols = ", ".join(quote_ident(c) for c in frame.columns)
    con.register("records_df", frame)
    try:
        con.execute(f"INSERT INTO {table_ref(table, catalog)} ({cols}) SELECT {cols} FROM records_df")
    finally:
        con.unregister("records_df")
    return int(len(frame))
