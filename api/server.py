"""
api/server.py

REST backend for the address tables.

    GET  /api/data/{table}            up to ROW_LIMIT rows as a JSON array
    POST /api/update-coords/{table}   set latitude/longitude by address key
    GET  /api/tables                  the table allow-list

Every error response carries ``{"error": "<message>"}``.

Run with:
    uvicorn api.server:app --port 4000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Sequence

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import ALLOWED_TABLES, get_settings
from db.core import fetch_table, update_coords
from db.pool import ConnectionPool
from utils.log import log_event, setup_logging

logger = logging.getLogger(__name__)

REQUIRED_COORD_FIELDS = ("plz", "ort", "strasse", "hausnr", "latitude", "longitude")


class TableNotAllowedError(HTTPException):
    def __init__(self, table: str):
        super().__init__(status_code=400, detail="Tabelle nicht erlaubt")
        self.table = table


def _missing_fields(payload: Dict[str, Any]) -> list[str]:
    missing = []
    for f in REQUIRED_COORD_FIELDS:
        v = payload.get(f)
        if v is None or (isinstance(v, str) and not v.strip()):
            missing.append(f)
    return missing


def create_app(
    pool: Optional[ConnectionPool] = None,
    allowed_tables: Sequence[str] = ALLOWED_TABLES,
    row_limit: Optional[int] = None,
) -> FastAPI:
    settings = get_settings()
    pool = pool or ConnectionPool.from_settings(settings)
    allowed = tuple(allowed_tables)
    limit = int(row_limit if row_limit is not None else settings.row_limit)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        pool.close()

    app = FastAPI(title="GeoAnalytics API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.pool = pool
    app.state.allowed_tables = allowed

    @app.exception_handler(HTTPException)
    async def _error_body(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    def _check_table(table: str) -> None:
        if table not in allowed:
            raise TableNotAllowedError(table)

    @app.get("/api/tables")
    def list_tables() -> Dict[str, Any]:
        return {"tables": list(allowed)}

    @app.get("/api/data/{table}")
    def get_data(table: str):
        _check_table(table)
        try:
            with pool.acquire() as con:
                rows = fetch_table(con, table, limit=limit, catalog=pool.catalog)
        except Exception as exc:
            logger.exception("Read failed for %s", table)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return rows

    @app.post("/api/update-coords/{table}")
    def post_update_coords(table: str, payload: Optional[Dict[str, Any]] = Body(default=None)):
        payload = payload or {}
        missing = _missing_fields(payload)
        if missing:
            raise HTTPException(status_code=400, detail="Fehlende Felder: " + ", ".join(missing))
        _check_table(table)
        try:
            lat = float(payload["latitude"])
            lon = float(payload["longitude"])
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail="Ungültige Koordinaten") from exc

        try:
            with pool.acquire() as con:
                updated = update_coords(
                    con,
                    table,
                    plz=str(payload["plz"]),
                    ort=str(payload["ort"]),
                    strasse=str(payload["strasse"]),
                    hausnr=str(payload["hausnr"]),
                    latitude=lat,
                    longitude=lon,
                    catalog=pool.catalog,
                )
        except Exception as exc:
            logger.exception("Coordinate update failed for %s", table)
            raise HTTPException(status_code=500, detail=str(exc)) from exc

        if updated == 0:
            raise HTTPException(status_code=404, detail="Kein passender Datensatz gefunden")
        log_event("UPDATE_COORDS", "coordinates updated", {"table": table, "updated": updated})
        return {"success": True, "updated": updated}

    return app


app = create_app()


def main() -> None:
    import uvicorn

    setup_logging()
    settings = get_settings()
    logger.info("Backend läuft auf Port %s", settings.api_port)
    uvicorn.run(app, host="0.0.0.0", port=settings.api_port)


if __name__ == "__main__":
    main()
