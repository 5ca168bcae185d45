"""Fixed-precision grid grouping.

Buckets points by their coordinates rounded to a zoom-derived number of
decimals. Used as the fallback tier of the density engine and available on
its own through make_clusterer("grid").
"""

from typing import Dict, List, Sequence, Optional

from memories.models import GeoPoint
from clustering.base import Clusterer, Cluster
from clustering.utils import format_coord
from clustering.zoom import grid_precision


def grid_key(lat: float, lng: float, precision: int) -> str:
    """Bucket key for a coordinate.

    Example:
        >>> grid_key(40.1234567, -74.0000004, 6)
        'grid_40.123457_-74.000000'
    """
    return f"grid_{format_coord(lat, precision)}_{format_coord(lng, precision)}"


def grid_groups(points: Sequence[GeoPoint], precision: int) -> Dict[str, List[int]]:
    """Group point indices by rounded-coordinate key.

    Returns:
        Mapping of key to ascending store indices, keys in first-seen order.
    """
    groups: Dict[str, List[int]] = {}
    for i, p in enumerate(points):
        groups.setdefault(grid_key(p.lat, p.lng, precision), []).append(i)
    return groups


def build_grid_clusters(points: Sequence[GeoPoint], precision: int) -> List[Cluster]:
    return [
        Cluster(key=key, members=tuple(points[i] for i in idx), indices=tuple(idx))
        for key, idx in grid_groups(points, precision).items()
    ]


class GridClustering(Clusterer):
    """Group points sharing a rounded coordinate.

    Args:
        precision: Fixed number of decimals. If None (default), derived from
            the zoom level passed to fit().
        **kwargs: Additional arguments passed to Clusterer base class.
    """

    def __init__(self, precision: Optional[int] = None, **kwargs):
        super().__init__(**kwargs)
        self.precision = precision
        self.method = "grid"

    def fit(self, points: Sequence[GeoPoint], zoom: float) -> "GridClustering":
        points = list(points)
        precision = self.precision if self.precision is not None else grid_precision(zoom)
        self.params.update({"zoom": zoom, "precision": precision})
        self._finish(points, zoom, build_grid_clusters(points, precision))
        return self
