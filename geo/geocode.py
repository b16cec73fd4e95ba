# geo/geocode.py
from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

import pandas as pd
from geopy.exc import GeopyError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from config import get_settings
from records.schema import HAUSNR, LAT, LON, ORT, PLZ, STRASSE, has_coords
from utils.normalize import as_text

logger = logging.getLogger(__name__)

COUNTRY = "Deutschland"


def build_query(row) -> str:
    """'<Strasse> <Haus-Nr>, <PLZ> <Ort>, Deutschland'"""
    street = " ".join(p for p in (as_text(row.get(STRASSE)), as_text(row.get(HAUSNR))) if p)
    place = " ".join(p for p in (as_text(row.get(PLZ)), as_text(row.get(ORT))) if p)
    return ", ".join(p for p in (street, place, COUNTRY) if p)


class NominatimGeocoder:
    """Forward geocoding through geopy's Nominatim, one request per ``min_interval`` seconds."""

    def __init__(
        self,
        domain: Optional[str] = None,
        scheme: Optional[str] = None,
        user_agent: Optional[str] = None,
        min_interval: Optional[float] = None,
        timeout: float = 20.0,
        max_retries: int = 2,
        geolocator=None,
    ):
        settings = get_settings()
        self.geolocator = geolocator or Nominatim(
            user_agent=user_agent or settings.geocode_user_agent,
            domain=domain or settings.nominatim_domain,
            scheme=scheme or settings.nominatim_scheme,
            timeout=timeout,
        )
        self.min_interval = settings.geocode_interval if min_interval is None else min_interval
        self._geocode = RateLimiter(
            self.geolocator.geocode,
            min_delay_seconds=self.min_interval,
            max_retries=max_retries,
            swallow_exceptions=False,
        )

    def geocode(self, query: str) -> Optional[Tuple[float, float]]:
        if not query:
            return None
        try:
            location = self._geocode(query, exactly_one=True)
        except GeopyError as exc:
            logger.warning("Geocoding failed for %r: %s", query, exc)
            return None
        if location is None:
            return None
        return float(location.latitude), float(location.longitude)


def fill_missing_coords(
    df: pd.DataFrame,
    geocoder,
    on_progress: Optional[Callable[[int, int], None]] = None,
    on_hit: Optional[Callable[[pd.Series, float, float], None]] = None,
) -> Tuple[pd.DataFrame, int]:
    """Geocode records without coordinates. Returns (frame, filled_count).

    Records the geocoder cannot resolve keep empty coordinates. ``on_hit`` is
    called for every resolved record (used to write coordinates back).
    """
    if df is None or df.empty:
        return df, 0
    out = df.copy()
    todo = out.index[~has_coords(out)]
    filled = 0
    for i, idx in enumerate(todo, start=1):
        row = out.loc[idx]
        hit = geocoder.geocode(build_query(row))
        if hit is not None:
            lat, lon = hit
            out.at[idx, LAT] = lat
            out.at[idx, LON] = lon
            filled += 1
            if on_hit is not None:
                on_hit(out.loc[idx], lat, lon)
        if on_progress is not None:
            on_progress(i, len(todo))
    return out, filled
