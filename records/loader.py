# records/loader.py
#
# Multi-table loader:
# - fetches every configured table, one after the other
# - tags each row with its source table ("_table") and concatenates
# - a failing table is recorded and skipped; the batch always completes
# - the combined result is published only after all tables were attempted

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence

import pandas as pd

from records.schema import empty_records, has_coords, normalize_records, records_from_rows
from utils.log import log_event


class TableSource(Protocol):
    def fetch_table(self, table: str) -> list[dict]: ...


@dataclass(frozen=True)
class TableError:
    table: str
    message: str


@dataclass
class LoadResult:
    records: pd.DataFrame
    errors: List[TableError] = field(default_factory=list)
    loaded: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return int(len(self.records))

    @property
    def geocoded(self) -> int:
        return int(has_coords(self.records).sum()) if self.total else 0

    def summary(self) -> str:
        return f"{self.total} Anschlüsse geladen, {self.geocoded} mit Koordinaten"


def load_tables(
    source: TableSource,
    tables: Sequence[str],
    on_progress: Optional[Callable[[int, int, str], None]] = None,
) -> LoadResult:
    frames: List[pd.DataFrame] = []
    errors: List[TableError] = []
    loaded: List[str] = []

    for i, table in enumerate(tables, start=1):
        if on_progress is not None:
            on_progress(i, len(tables), table)
        try:
            rows = source.fetch_table(table)
            frames.append(records_from_rows(rows, table=table))
            loaded.append(table)
        except Exception as exc:
            errors.append(TableError(table=table, message=str(exc) or exc.__class__.__name__))
            log_event("LOAD_TABLES", "table failed", {"table": table, "error": str(exc)})

    frames = [f for f in frames if not f.empty]
    records = normalize_records(pd.concat(frames, ignore_index=True)) if frames else empty_records()
    result = LoadResult(records=records, errors=errors, loaded=loaded)

    log_event(
        "LOAD_TABLES",
        "tables loaded",
        {"total": result.total, "geocoded": result.geocoded, "loaded": loaded, "failed": [e.table for e in errors]},
    )
    return result
