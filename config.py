from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ROOT = Path(__file__).resolve().parent

# Address tables exposed through the API. The frontend loads them in this order.
ALLOWED_TABLES = (
    "Gefilterte_Adressen_Geesthacht",
    "Gefilterte_Adressen_Gülzow",
    "Gefilterte_Adressen_Hamwarde",
    "Gefilterte_Adressen_Kollow",
    "Gefilterte_Adressen_Wiershop",
    "Gefilterte_Adressen_Worth",
)
TABLE_PREFIX = "Gefilterte_Adressen_"

ROW_LIMIT = 10_000


def _env(name: str, default: str) -> str:
    return os.getenv(name, default).strip()


@dataclass(frozen=True)
class Settings:
    db_backend: str
    duckdb_path: str
    pg_host: str
    pg_port: int
    pg_user: str
    pg_password: str
    pg_database: str
    pool_size: int
    row_limit: int
    api_url: str
    api_timeout: float
    api_port: int
    nominatim_domain: str
    nominatim_scheme: str
    geocode_interval: float
    geocode_user_agent: str
    heat_weight: str

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            db_backend=_env("GEO_DB_BACKEND", "duckdb").lower(),
            duckdb_path=_env("GEO_DUCKDB_PATH", str(ROOT / "data" / "db" / "geoanalytics.duckdb")),
            pg_host=_env("PGHOST", "localhost"),
            pg_port=int(_env("PGPORT", "5432")),
            pg_user=_env("PGUSER", "postgres"),
            pg_password=_env("PGPASSWORD", "postgres"),
            pg_database=_env("PGDATABASE", "postgres"),
            pool_size=int(_env("GEO_POOL_SIZE", "4")),
            row_limit=int(_env("GEO_ROW_LIMIT", str(ROW_LIMIT))),
            api_url=_env("GEO_API_URL", "http://localhost:4000/api").rstrip("/"),
            api_timeout=float(_env("GEO_API_TIMEOUT", "30")),
            api_port=int(_env("PORT", "4000")),
            nominatim_domain=_env("GEO_NOMINATIM_DOMAIN", "nominatim.openstreetmap.org"),
            nominatim_scheme=_env("GEO_NOMINATIM_SCHEME", "https"),
            geocode_interval=float(_env("GEO_GEOCODE_INTERVAL", "1.0")),
            geocode_user_agent=_env("GEO_GEOCODE_USER_AGENT", "geoanalytics-dashboard/1.0"),
            heat_weight=_env("GEO_HEAT_WEIGHT", "count").lower(),
        )

    @property
    def postgres_dsn(self) -> str:
        """libpq connection string for DuckDB's postgres extension."""
        return (
            f"host={self.pg_host} port={self.pg_port} dbname={self.pg_database} "
            f"user={self.pg_user} password={self.pg_password}"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
