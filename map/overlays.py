"""
map/overlays.py: overlay switcher (heatmap / cluster / marker)

One folium map per page, holding exactly one data overlay at a time.

- attach() always detaches every previous overlay before building the new one
- records without both coordinates are never drawn
- heat intensity follows a HeatWeight policy (count by default)
- ViewportController decides whether a render auto-fits to the data
  (initial -> auto_fit -> user_controlled, back only via reset())
"""

from __future__ import annotations

import html
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Iterator, List, Optional, Tuple

import folium
import pandas as pd
from folium.plugins import HeatMap, MarkerCluster

from records.schema import (
    ADDRESS,
    ART,
    DATUM,
    KW,
    LAT,
    LON,
    NOTIZ,
    PLZ,
    SPARTE,
    has_coords,
    kw_value,
)

# Center of Germany
DEFAULT_CENTER = (51.1657, 10.4515)
DEFAULT_ZOOM = 6
FIT_PADDING = 0.1

HEAT_GRADIENT = {
    0.0: "#0066ff",
    0.2: "#00ccff",
    0.4: "#00ff99",
    0.6: "#66ff00",
    0.8: "#ffcc00",
    1.0: "#ff3300",
}


class OverlayKind(str, Enum):
    HEATMAP = "heatmap"
    CLUSTER = "cluster"
    MARKER = "marker"


OVERLAY_LABELS = {
    OverlayKind.HEATMAP: "Heatmap",
    OverlayKind.CLUSTER: "Cluster",
    OverlayKind.MARKER: "Einzelne Marker",
}
DEFAULT_OVERLAY = OverlayKind.HEATMAP


class HeatWeight(str, Enum):
    COUNT = "count"  # every record weighs 1
    KW = "kw"        # weight = KW-Zahl (at least 1)


def heat_weight_from(value: Optional[str]) -> HeatWeight:
    try:
        return HeatWeight(str(value or "").lower())
    except ValueError:
        return HeatWeight.COUNT


# =====================================================================
# Viewport state machine
# =====================================================================
class ViewportMode(str, Enum):
    INITIAL = "initial"
    AUTO_FIT = "auto_fit"
    USER_CONTROLLED = "user_controlled"


@dataclass(frozen=True)
class Viewport:
    center: Tuple[float, float]
    zoom: float

    def differs(self, other: "Viewport", tol: float = 1e-4) -> bool:
        return (
            abs(self.center[0] - other.center[0]) > tol
            or abs(self.center[1] - other.center[1]) > tol
            or abs(self.zoom - other.zoom) > 1e-6
        )


class ViewportController:
    """
    initial          -> auto_fit         first render with data
    auto_fit         -> user_controlled  pan / zoom / drag
    user_controlled  -> auto_fit         reset() only
    """

    def __init__(self) -> None:
        self.mode = ViewportMode.INITIAL
        self.viewport: Optional[Viewport] = None
        # viewport the widget reported right after our last auto-fit
        self._baseline: Optional[Viewport] = None
        # baseline of the previous fit target; reports equal to it are stale
        self._stale: Optional[Viewport] = None
        self._fit_key: Hashable = None

    def should_fit(self, has_points: bool, key: Hashable = None) -> bool:
        """
        Called once per render, before the map is drawn. ``key`` identifies
        the fit target (e.g. the data bounds); a new key starts a new baseline.
        """
        if self.mode is ViewportMode.INITIAL and has_points:
            self.mode = ViewportMode.AUTO_FIT
        if self.mode is ViewportMode.AUTO_FIT and has_points:
            if key != self._fit_key:
                self._fit_key = key
                self._stale = self._baseline
                self._baseline = None
            return True
        return False

    def on_user_interaction(self, viewport: Viewport) -> None:
        if self.mode is ViewportMode.INITIAL:
            return
        self.mode = ViewportMode.USER_CONTROLLED
        self.viewport = viewport

    def observe(self, viewport: Optional[Viewport], rendered: Optional[Viewport] = None) -> None:
        """
        Viewport reported by the map widget after a render. ``rendered`` is
        the center/zoom the map was created with; a report equal to it means
        the widget has not applied the fit yet.
        """
        if viewport is None or self.mode is ViewportMode.INITIAL:
            return
        if self.mode is ViewportMode.USER_CONTROLLED:
            self.viewport = viewport
            return
        for ref in (rendered, self._stale):
            if ref is not None and not viewport.differs(ref):
                return
        if self._baseline is None:
            self._baseline = viewport
            return
        if viewport.differs(self._baseline):
            self.on_user_interaction(viewport)

    def reset(self) -> None:
        if self.mode is not ViewportMode.INITIAL:
            self.mode = ViewportMode.AUTO_FIT
        self.viewport = None
        self._baseline = None
        self._stale = None
        self._fit_key = None


# =====================================================================
# Geometry helpers
# =====================================================================
def visible_points(df: pd.DataFrame) -> pd.DataFrame:
    if df is None or df.empty:
        return pd.DataFrame(columns=list(df.columns) if df is not None else [])
    return df[has_coords(df)]


def padded_bounds(points: pd.DataFrame, pad: float = FIT_PADDING) -> Optional[List[List[float]]]:
    """[[south, west], [north, east]] grown by ``pad`` of the span on each side."""
    if points is None or points.empty:
        return None
    lat = points[LAT].astype(float)
    lon = points[LON].astype(float)
    south, north = float(lat.min()), float(lat.max())
    west, east = float(lon.min()), float(lon.max())
    dlat = (north - south) * pad
    dlon = (east - west) * pad
    return [[south - dlat, west - dlon], [north + dlat, east + dlon]]


def popup_html(row: pd.Series) -> str:
    def esc(v) -> str:
        return html.escape(str(v))

    lines = [
        f'<h4 style="margin:0 0 6px 0;color:#2563eb">{esc(row.get(SPARTE, ""))}</h4>',
        f"<b>Adresse:</b> {esc(row.get(ADDRESS, ''))}<br/>",
        f"<b>PLZ:</b> {esc(row.get(PLZ, ''))}<br/>",
        f"<b>Art:</b> {esc(row.get(ART, ''))}<br/>",
    ]
    for label, col in (("KW-Zahl", KW), ("Notiz", NOTIZ), ("Datum", DATUM)):
        v = row.get(col, "")
        if v not in ("", None) and not (isinstance(v, float) and pd.isna(v)):
            lines.append(f"<b>{label}:</b> {esc(v)}<br/>")
    return '<div style="min-width:250px">' + "".join(lines) + "</div>"


def heat_points(points: pd.DataFrame, weight: HeatWeight = HeatWeight.COUNT) -> List[List[float]]:
    out = []
    for _, r in points.iterrows():
        w = 1.0
        if weight is HeatWeight.KW:
            w = max(1.0, kw_value(r.get(KW)))
        out.append([float(r[LAT]), float(r[LON]), w])
    return out


# =====================================================================
# Overlay map resource
# =====================================================================
class OverlayMap:
    """
    Lifecycle:  create() -> attach(kind, df)* -> detach() -> destroy()

    Only overlays created by attach() are tracked; the base tile layer stays.
    """

    def __init__(
        self,
        center: Tuple[float, float] = DEFAULT_CENTER,
        zoom: float = DEFAULT_ZOOM,
        tiles: str = "OpenStreetMap",
        heat_weight: HeatWeight = HeatWeight.COUNT,
    ):
        self.center = center
        self.zoom = zoom
        self.tiles = tiles
        self.heat_weight = heat_weight
        self.map: Optional[folium.Map] = None
        self.kind: Optional[OverlayKind] = None
        self._overlays: List[folium.map.Layer] = []

    # -----------------------------------------------------------------
    def create(self) -> folium.Map:
        if self.map is None:
            self.map = folium.Map(
                location=list(self.center),
                zoom_start=self.zoom,
                tiles=self.tiles,
                control_scale=True,
                scrollWheelZoom=True,
            )
        return self.map

    @property
    def overlays(self) -> List[folium.map.Layer]:
        return list(self._overlays)

    def detach(self) -> None:
        if self.map is not None:
            for layer in self._overlays:
                self.map._children.pop(layer.get_name(), None)
        self._overlays = []
        self.kind = None

    def attach(self, kind: OverlayKind, df: pd.DataFrame) -> Optional[folium.map.Layer]:
        m = self.create()
        self.detach()
        kind = OverlayKind(kind)
        points = visible_points(df)
        if points.empty:
            return None

        if kind is OverlayKind.HEATMAP:
            layer = HeatMap(
                heat_points(points, self.heat_weight),
                name="Heatmap",
                radius=25,
                blur=15,
                max_zoom=17,
                gradient=HEAT_GRADIENT,
            )
        elif kind is OverlayKind.CLUSTER:
            layer = MarkerCluster(name="Cluster")
            self._add_markers(layer, points)
        else:
            layer = folium.FeatureGroup(name="Marker")
            self._add_markers(layer, points)

        layer.add_to(m)
        self._overlays.append(layer)
        self.kind = kind
        return layer

    def fit(self, df: pd.DataFrame, max_zoom: int = 16) -> bool:
        bounds = padded_bounds(visible_points(df))
        if bounds is None:
            return False
        self.create().fit_bounds(bounds, max_zoom=max_zoom)
        return True

    def destroy(self) -> None:
        self.detach()
        self.map = None

    @staticmethod
    def _add_markers(layer, points: pd.DataFrame) -> None:
        for _, row in points.iterrows():
            folium.Marker(
                location=[float(row[LAT]), float(row[LON])],
                popup=folium.Popup(popup_html(row), max_width=320),
                tooltip=str(row.get(ADDRESS, "")),
            ).add_to(layer)


@contextmanager
def overlay_map(
    center: Tuple[float, float] = DEFAULT_CENTER,
    zoom: float = DEFAULT_ZOOM,
    heat_weight: HeatWeight = HeatWeight.COUNT,
) -> Iterator[OverlayMap]:
    om = OverlayMap(center=center, zoom=zoom, heat_weight=heat_weight)
    om.create()
    try:
        yield om
    finally:
        om.destroy()
