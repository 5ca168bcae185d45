"""Zoom-adaptive clustering parameters.

Maps a map zoom level onto a neighbourhood radius (degrees) and minimum
cluster size with a monotonic step function: higher zoom, tighter grouping.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, List, Tuple, Any

from clustering.base import ClusterParameters

MAX_DETAIL_ZOOM = 18


@dataclass(frozen=True)
class ZoomTier:
    """One step of the table: applies when zoom >= min_zoom.

    A min_zoom of None marks the catch-all tier for every lower zoom.
    """

    min_zoom: Optional[float]
    radius: float
    min_points: int


DEFAULT_ZOOM_TIERS: Tuple[ZoomTier, ...] = (
    ZoomTier(16, 0.0001, 2),  # ~11 m
    ZoomTier(14, 0.0005, 2),  # ~55 m
    ZoomTier(12, 0.002, 2),   # ~220 m
    ZoomTier(10, 0.008, 2),   # ~900 m
    ZoomTier(8, 0.03, 2),     # ~3.3 km
    ZoomTier(6, 0.12, 3),     # ~13 km
    ZoomTier(None, 0.5, 3),   # ~55 km
)


class ZoomParameterTable:
    """Step function from zoom level to ClusterParameters.

    Args:
        tiers: Tiers ordered from highest min_zoom down. The last tier is the
            catch-all; if its min_zoom is set it still applies below it.

    Raises:
        ValueError: If the table is empty, a radius is not positive,
            min_points is below 1, tiers are out of order, or radii shrink
            as zoom falls.
    """

    def __init__(self, tiers: Optional[Sequence[ZoomTier]] = None):
        self.tiers: Tuple[ZoomTier, ...] = tuple(tiers if tiers is not None else DEFAULT_ZOOM_TIERS)
        self._validate()

    @classmethod
    def from_config(cls, cfg: dict) -> "ZoomParameterTable":
        """Build from the ``clustering.zoom_tiers`` config list.

        Each entry is ``[min_zoom, radius_deg, min_points]`` (min_zoom may be
        null for the catch-all tier).
        """
        raw = cfg.get("clustering", {}).get("zoom_tiers")
        if raw is None:
            return cls()
        tiers = []
        for entry in raw:
            if len(entry) != 3:
                raise ValueError(f"Zoom tier must be [min_zoom, radius, min_points], got {entry!r}")
            min_zoom, radius, min_points = entry
            tiers.append(ZoomTier(
                None if min_zoom is None else float(min_zoom),
                float(radius),
                int(min_points),
            ))
        return cls(tiers)

    def _validate(self) -> None:
        if not self.tiers:
            raise ValueError("Zoom table needs at least one tier")
        for i, tier in enumerate(self.tiers):
            if not (tier.radius > 0 and math.isfinite(tier.radius)):
                raise ValueError(f"Tier {i}: radius must be a positive number, got {tier.radius!r}")
            if tier.min_points < 1:
                raise ValueError(f"Tier {i}: min_points must be >= 1, got {tier.min_points!r}")
            if tier.min_zoom is None and i != len(self.tiers) - 1:
                raise ValueError(f"Tier {i}: only the last tier may omit min_zoom")

        for prev, cur in zip(self.tiers, self.tiers[1:]):
            if cur.min_zoom is not None and prev.min_zoom is not None and cur.min_zoom >= prev.min_zoom:
                raise ValueError("Zoom tiers must be ordered from highest min_zoom down")
            if cur.radius < prev.radius:
                raise ValueError("Tier radius must not shrink as zoom decreases")

    def parameters(self, zoom: float) -> ClusterParameters:
        """Return clustering parameters for a zoom level.

        Example:
            >>> ZoomParameterTable().parameters(14.5)
            ClusterParameters(radius=0.0005, min_points=2)
        """
        for tier in self.tiers[:-1]:
            if tier.min_zoom is not None and zoom >= tier.min_zoom:
                return ClusterParameters(tier.radius, tier.min_points)
        last = self.tiers[-1]
        return ClusterParameters(last.radius, last.min_points)

    def to_config(self) -> List[List[Any]]:
        return [[t.min_zoom, t.radius, t.min_points] for t in self.tiers]


_DEFAULT_TABLE = ZoomParameterTable()


def parameters_for_zoom(zoom: float, table: Optional[ZoomParameterTable] = None) -> ClusterParameters:
    """Return clustering parameters for a zoom level (default table)."""
    return (table or _DEFAULT_TABLE).parameters(zoom)


def grid_precision(zoom: float) -> int:
    """Decimal places used by the grid fallback at a zoom level.

    Coarser rounding at lower zoom: one extra decimal per three zoom levels,
    capped at 6 (about 0.1 m), which is what the max-detail tier uses.

    Example:
        >>> grid_precision(18), grid_precision(12), grid_precision(2)
        (6, 4, 0)
    """
    if not math.isfinite(zoom):
        return 6 if zoom > 0 else 0
    return max(0, min(6, int(math.floor(zoom / 3))))
