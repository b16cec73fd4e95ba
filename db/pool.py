# =====================================================================
# db/pool.py: shared DuckDB connection pool
# =====================================================================

from __future__ import annotations

import logging
import queue
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import duckdb

from config import Settings, get_settings

logger = logging.getLogger(__name__)

# Catalog name the PostgreSQL store is attached under.
PG_CATALOG = "store"


class ConnectionPool:
    """
    Fixed-size pool of DuckDB cursors over one long-lived base connection.

    Backends:
        - duckdb:   a local DuckDB file (or ":memory:")
        - postgres: an in-memory DuckDB with the PostgreSQL database
                    attached as catalog "store"

    The base connection is opened lazily on first acquire().
    """

    def __init__(
        self,
        backend: str = "duckdb",
        database: str = ":memory:",
        size: int = 4,
        pg_dsn: Optional[str] = None,
    ):
        if backend not in ("duckdb", "postgres"):
            raise ValueError(f"Unsupported backend: {backend}")
        if backend == "postgres" and not pg_dsn:
            raise ValueError("postgres backend requires a DSN")
        self.backend = backend
        self.database = database
        self.size = max(1, int(size))
        self.pg_dsn = pg_dsn
        self._base: Optional[duckdb.DuckDBPyConnection] = None
        self._idle: "queue.Queue[duckdb.DuckDBPyConnection]" = queue.Queue()
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ConnectionPool":
        s = settings or get_settings()
        return cls(
            backend=s.db_backend,
            database=s.duckdb_path,
            size=s.pool_size,
            pg_dsn=s.postgres_dsn if s.db_backend == "postgres" else None,
        )

    @property
    def catalog(self) -> Optional[str]:
        """Catalog prefix for table references (None = default catalog)."""
        return PG_CATALOG if self.backend == "postgres" else None

    def _connect(self) -> duckdb.DuckDBPyConnection:
        if self.backend == "postgres":
            con = duckdb.connect(":memory:")
            con.execute("INSTALL postgres;")
            con.execute("LOAD postgres;")
            con.execute(f"ATTACH '{self.pg_dsn}' AS {PG_CATALOG} (TYPE postgres)")
            logger.info("Attached PostgreSQL store as %s", PG_CATALOG)
            return con

        if self.database != ":memory:":
            Path(self.database).parent.mkdir(parents=True, exist_ok=True)
        con = duckdb.connect(self.database, read_only=False)
        logger.info("Opened DuckDB store %s", self.database)
        return con

    def _ensure_open(self) -> None:
        with self._lock:
            if self._base is not None:
                return
            self._base = self._connect()
            for _ in range(self.size):
                self._idle.put(self._base.cursor())

    @contextmanager
    def acquire(self, timeout: Optional[float] = None) -> Iterator[duckdb.DuckDBPyConnection]:
        self._ensure_open()
        try:
            cur = self._idle.get(timeout=timeout)
        except queue.Empty as exc:
            raise TimeoutError("No database connection available") from exc
        try:
            yield cur
        finally:
            self._idle.put(cur)

    def close(self) -> None:
        with self._lock:
            while True:
                try:
                    self._idle.get_nowait().close()
                except queue.Empty:
                    break
            if self._base is not None:
                self._base.close()
            self._base = None
