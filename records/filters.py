"""
records/filters.py

Filter state for the record set and the predicates derived from it.

All predicates are combined with AND. Empty allow-lists and ``None`` ranges
mean "no restriction"; a default ``FilterState()`` therefore passes every
record. Filtering never reorders or copies rows beyond the boolean selection,
so the result is always a subset of the input frame.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

import pandas as pd

from records.schema import (
    ADDRESS,
    ART,
    ORT,
    PLZ,
    SPARTE,
    STRASSE,
    kw_series,
    year_series,
)


@dataclass(frozen=True)
class FilterState:
    orte: Tuple[str, ...] = field(default_factory=tuple)
    arten: Tuple[str, ...] = field(default_factory=tuple)
    sparten: Tuple[str, ...] = field(default_factory=tuple)
    kw_range: Optional[Tuple[float, float]] = None
    year_range: Optional[Tuple[int, int]] = None
    search: str = ""

    @classmethod
    def build(
        cls,
        orte: Iterable[str] = (),
        arten: Iterable[str] = (),
        sparten: Iterable[str] = (),
        kw_range: Optional[Tuple[float, float]] = None,
        year_range: Optional[Tuple[int, int]] = None,
        search: str = "",
    ) -> "FilterState":
        return cls(
            orte=tuple(orte or ()),
            arten=tuple(arten or ()),
            sparten=tuple(sparten or ()),
            kw_range=tuple(kw_range) if kw_range is not None else None,
            year_range=tuple(year_range) if year_range is not None else None,
            search=(search or "").strip(),
        )

    @property
    def is_active(self) -> bool:
        return bool(
            self.orte
            or self.arten
            or self.sparten
            or self.kw_range is not None
            or self.year_range is not None
            or self.search
        )


# ---------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------
def _allow(df: pd.DataFrame, column: str, allowed: Tuple[str, ...]) -> pd.Series:
    return df[column].astype(str).isin(set(allowed))


def _search_mask(df: pd.DataFrame, needle: str) -> pd.Series:
    needle = needle.lower()
    mask = pd.Series(False, index=df.index)
    for col in (ADDRESS, STRASSE, PLZ, ORT):
        if col in df.columns:
            mask |= df[col].astype(str).str.lower().str.contains(needle, regex=False, na=False)
    return mask


def filter_mask(df: pd.DataFrame, state: FilterState) -> pd.Series:
    """Boolean mask of records that satisfy every active predicate."""
    mask = pd.Series(True, index=df.index)
    if df.empty:
        return mask

    if state.orte:
        mask &= _allow(df, ORT, state.orte)
    if state.arten:
        mask &= _allow(df, ART, state.arten)
    if state.sparten:
        mask &= _allow(df, SPARTE, state.sparten)

    if state.kw_range is not None:
        lo, hi = state.kw_range
        kw = kw_series(df)
        mask &= (kw >= float(lo)) & (kw <= float(hi))

    if state.year_range is not None:
        lo, hi = state.year_range
        years = year_series(df)
        mask &= (years.notna() & (years >= int(lo)) & (years <= int(hi))).fillna(False).astype(bool)

    if state.search:
        mask &= _search_mask(df, state.search)

    return mask


def apply_filters(df: pd.DataFrame, state: Optional[FilterState]) -> pd.DataFrame:
    if df is None:
        return pd.DataFrame()
    if state is None or not state.is_active:
        return df
    return df[filter_mask(df, state)]


# ---------------------------------------------------------------------
# Filter options
# ---------------------------------------------------------------------
def filter_options(df: pd.DataFrame, column: str) -> list[str]:
    """Sorted distinct values for a multiselect; blanks and "NaN" dropped."""
    if df is None or df.empty or column not in df.columns:
        return []
    values = df[column].astype(str).str.strip()
    values = values[(values != "") & (values.str.upper() != "NAN")]
    return sorted(values.unique().tolist())


def year_bounds(df: pd.DataFrame) -> Optional[Tuple[int, int]]:
    years = year_series(df).dropna()
    if years.empty:
        return None
    return int(years.min()), int(years.max())


def kw_bounds(df: pd.DataFrame) -> Optional[Tuple[float, float]]:
    kw = kw_series(df)
    if kw.empty:
        return None
    return float(kw.min()), float(kw.max())
