from __future__ import annotations

import argparse
import logging

from config import ALLOWED_TABLES, get_settings
from db.core import table_exists, table_columns, table_ref
from db.pool import ConnectionPool
from utils.log import setup_logging

logger = logging.getLogger(__name__)


def inspect_tables(pool: ConnectionPool, tables, sample: int = 5) -> None:
    with pool.acquire() as con:
        for table_name in tables:
            print(f"\n--- {table_name} ---")
            if not table_exists(con, table_name, pool.catalog):
                print("Table missing.")
                continue

            # Schema
            print("Schema:")
            print(table_columns(con, table_name, pool.catalog))

            # Row count
            ref = table_ref(table_name, pool.catalog)
            row_count = con.execute(f"SELECT COUNT(*) FROM {ref}").fetchone()[0]
            geocoded = con.execute(
                f"SELECT COUNT(*) FROM {ref} WHERE latitude IS NOT NULL AND longitude IS NOT NULL"
            ).fetchone()[0]
            print(f"Row count: {row_count} ({geocoded} with coordinates)")

            if row_count > 0 and sample > 0:
                print("Sample rows:")
                print(con.execute(f"SELECT * FROM {ref} LIMIT {int(sample)}").fetchdf())
            else:
                print("No rows in table.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Show columns, row counts and sample rows of the address tables.")
    parser.add_argument("tables", nargs="*", help="table names (default: all allow-listed tables)")
    parser.add_argument("--sample", type=int, default=5, help="sample rows per table")
    args = parser.parse_args()

    setup_logging()
    settings = get_settings()
    logger.info("Inspecting %s store", settings.db_backend)

    pool = ConnectionPool.from_settings(settings)
    try:
        inspect_tables(pool, args.tables or ALLOWED_TABLES, sample=args.sample)
    finally:
        pool.close()


if __name__ == "__main__":
    main()
