"""Geographic to screen-pixel projection.

The host map normally owns projection; WebMercatorProjector reproduces the
standard 256-px tile pyramid so the core can run headless and render static
snapshots.
"""

import math
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional, Tuple, Protocol

from pyproj import Transformer

MAX_LATITUDE = 85.05112878
MERCATOR_HALF_WORLD_M = 20037508.342789244


class Projector(Protocol):
    def project(self, lat: float, lng: float) -> Optional[Tuple[float, float]]: ...
    def unproject(self, px: float, py: float) -> Optional[Tuple[float, float]]: ...


@lru_cache(maxsize=1)
def _transformers() -> Tuple[Transformer, Transformer]:
    """EPSG:4326 <-> EPSG:3857"""
    to_merc = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
    to_geo = Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)
    return to_merc, to_geo


@dataclass(frozen=True)
class WebMercatorProjector:
    """Viewport projection for a Web Mercator map.

    Pixel (0, 0) is the viewport's top-left corner, y grows downwards.

    Attributes:
        center_lat: Latitude at the viewport centre.
        center_lng: Longitude at the viewport centre.
        zoom: Map zoom level (None until the host reports one).
        width: Viewport width in logical px.
        height: Viewport height in logical px.
        tile_size: Tile edge in px (256 for most providers).
    """

    center_lat: float
    center_lng: float
    zoom: Optional[float]
    width: int
    height: int
    tile_size: int = 256

    @property
    def ready(self) -> bool:
        return self.zoom is not None and self.width > 0 and self.height > 0

    @property
    def world_size(self) -> float:
        return self.tile_size * (2.0 ** self.zoom)

    def with_view(
        self,
        zoom: Optional[float] = None,
        center: Optional[Tuple[float, float]] = None,
    ) -> "WebMercatorProjector":
        """Copy with a new zoom and/or (lat, lng) centre."""
        changes = {}
        if zoom is not None:
            changes["zoom"] = zoom
        if center is not None:
            changes["center_lat"], changes["center_lng"] = center
        return replace(self, **changes)

    def _world_px(self, lat: float, lng: float) -> Tuple[float, float]:
        to_merc, _ = _transformers()
        lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))
        x_m, y_m = to_merc.transform(lng, lat)
        scale = self.world_size / (2 * MERCATOR_HALF_WORLD_M)
        return (x_m + MERCATOR_HALF_WORLD_M) * scale, (MERCATOR_HALF_WORLD_M - y_m) * scale

    def project(self, lat: float, lng: float) -> Optional[Tuple[float, float]]:
        """Viewport pixel for a coordinate, or None if the view is not ready."""
        if not self.ready:
            return None
        if not (math.isfinite(lat) and math.isfinite(lng)):
            return None
        wx, wy = self._world_px(lat, lng)
        cx, cy = self._world_px(self.center_lat, self.center_lng)
        return wx - cx + self.width / 2.0, wy - cy + self.height / 2.0

    def unproject(self, px: float, py: float) -> Optional[Tuple[float, float]]:
        """Coordinate under a viewport pixel, longitude wrapped to [-180, 180)."""
        if not self.ready:
            return None
        _, to_geo = _transformers()
        cx, cy = self._world_px(self.center_lat, self.center_lng)
        wx = px - self.width / 2.0 + cx
        wy = py - self.height / 2.0 + cy
        scale = self.world_size / (2 * MERCATOR_HALF_WORLD_M)
        x_m = wx / scale - MERCATOR_HALF_WORLD_M
        y_m = MERCATOR_HALF_WORLD_M - wy / scale
        y_m = max(-MERCATOR_HALF_WORLD_M, min(MERCATOR_HALF_WORLD_M, y_m))
        lng, lat = to_geo.transform(x_m, y_m)
        lng = ((lng + 180.0) % 360.0) - 180.0
        return lat, lng


def fit_view(
    points,
    width: int,
    height: int,
    tile_size: int = 256,
    padding: int = 64,
    max_zoom: int = 20,
) -> WebMercatorProjector:
    """Projector centred on points at the highest zoom that shows them all.

    Args:
        points: Non-empty iterable of GeoPoints.
        width: Viewport width in px.
        height: Viewport height in px.
        padding: Margin kept free on every side, px.
        max_zoom: Upper zoom bound (single points use it).

    Raises:
        ValueError: If points is empty.
    """
    points = list(points)
    if not points:
        raise ValueError("Cannot fit a view to zero points")
    lats = [p.lat for p in points]
    lngs = [p.lng for p in points]
    center = ((min(lats) + max(lats)) / 2.0, (min(lngs) + max(lngs)) / 2.0)

    zoom = max_zoom
    while zoom > 0:
        view = WebMercatorProjector(center[0], center[1], zoom, width, height, tile_size)
        x0, y0 = view.project(max(lats), min(lngs))
        x1, y1 = view.project(min(lats), max(lngs))
        if (x0 >= padding and y0 >= padding
                and x1 <= width - padding and y1 <= height - padding):
            break
        zoom -= 1
    return WebMercatorProjector(center[0], center[1], zoom, width, height, tile_size)
