"""
Geocode address records without coordinates and store the results through the API.

    python -m scripts.geocode_fill                  # all allow-listed tables
    python -m scripts.geocode_fill --limit 50 Gefilterte_Adressen_Worth
"""

from __future__ import annotations

import argparse
import logging

from api.client import ApiClient, ApiError
from config import ALLOWED_TABLES
from geo.geocode import NominatimGeocoder, fill_missing_coords
from records.schema import HAUSNR, ORT, PLZ, STRASSE, has_coords, records_from_rows
from utils.log import log_event, setup_logging

logger = logging.getLogger(__name__)


def geocode_table(client: ApiClient, geocoder: NominatimGeocoder, table: str, limit: int | None = None) -> tuple[int, int]:
    """Returns (filled, stored) for one table."""
    df = records_from_rows(client.fetch_table(table), table=table)
    todo = df[~has_coords(df)] if not df.empty else df
    if limit is not None:
        todo = todo.head(limit)
    logger.info("%s: %d records without coordinates", table, len(todo))
    stored = 0

    def _store(row, lat: float, lon: float) -> None:
        nonlocal stored
        try:
            stored += client.update_coords(
                table,
                plz=str(row[PLZ]),
                ort=str(row[ORT]),
                strasse=str(row[STRASSE]),
                hausnr=str(row[HAUSNR]),
                latitude=lat,
                longitude=lon,
            )
        except ApiError as exc:
            logger.warning("%s: update failed for %s %s: %s", table, row[STRASSE], row[HAUSNR], exc)

    def _progress(i: int, n: int) -> None:
        if i % 10 == 0 or i == n:
            logger.info("%s: %d/%d", table, i, n)

    _, filled = fill_missing_coords(todo, geocoder, on_progress=_progress, on_hit=_store)
    return filled, stored


def main() -> None:
    parser = argparse.ArgumentParser(description="Fill missing coordinates via Nominatim and the API.")
    parser.add_argument("tables", nargs="*", help="tables (default: all allow-listed tables)")
    parser.add_argument("--limit", type=int, default=None, help="max records per table")
    args = parser.parse_args()

    setup_logging()
    client = ApiClient()
    geocoder = NominatimGeocoder()

    for table in args.tables or ALLOWED_TABLES:
        try:
            filled, stored = geocode_table(client, geocoder, table, limit=args.limit)
        except ApiError as exc:
            logger.error("%s: %s", table, exc)
            continue
        logger.info("%s: %d geocoded, %d rows updated", table, filled, stored)
        log_event("GEOCODE_FILL", "table geocoded", {"table": table, "filled": filled, "stored": stored})


if __name__ == "__main__":
    main()
