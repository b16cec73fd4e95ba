"""
Load workbooks into the address tables.

    python -m scripts.seed_tables data/Geesthacht.xlsx --table Gefilterte_Adressen_Geesthacht
    python -m scripts.seed_tables data/imports/          # one file per place, name = table suffix
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from config import ALLOWED_TABLES, TABLE_PREFIX, get_settings
from db.core import ensure_store_schema, insert_records, table_ref
from db.pool import ConnectionPool
from records.exchange import read_csv, read_workbook
from utils.log import log_event, setup_logging

logger = logging.getLogger(__name__)

SUFFIXES = (".xlsx", ".xls", ".csv")


def _files(path: Path) -> list[Path]:
    if path.is_dir():
        return sorted(p for p in path.iterdir() if p.suffix.lower() in SUFFIXES)
    return [path]


def _table_for(path: Path, explicit: str | None) -> str:
    return explicit or TABLE_PREFIX + path.stem


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the address tables from Excel/CSV files.")
    parser.add_argument("path", help="file or directory")
    parser.add_argument("--table", help="target table (single file only)")
    parser.add_argument("--replace", action="store_true", help="delete existing rows first")
    args = parser.parse_args()

    setup_logging()
    settings = get_settings()
    logger.info("=== Seed start (%s) ===", settings.db_backend)

    pool = ConnectionPool.from_settings(settings)
    try:
        with pool.acquire() as con:
            created = ensure_store_schema(con, ALLOWED_TABLES, pool.catalog)
            if created:
                logger.info("Created tables: %s", ", ".join(created))

            for path in _files(Path(args.path)):
                table = _table_for(path, args.table)
                if table not in ALLOWED_TABLES:
                    logger.warning("Skipping %s: %s is not an allowed table", path.name, table)
                    continue
                df = read_csv(str(path)) if path.suffix.lower() == ".csv" else read_workbook(str(path))
                if args.replace:
                    con.execute(f"DELETE FROM {table_ref(table, pool.catalog)}")
                n = insert_records(con, table, df, pool.catalog)
                logger.info("%s -> %s: %d rows", path.name, table, n)
                log_event("SEED", "rows inserted", {"file": path.name, "table": table, "rows": n})

        logger.info("=== Seed complete ===")
    except Exception as exc:
        logger.exception("Seed failed: %s", exc)
        raise
    finally:
        pool.close()


if __name__ == "__main__":
    main()
