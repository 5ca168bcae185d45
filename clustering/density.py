"""Density clustering for map markers.

Neighbour-expansion grouping in the spirit of DBSCAN, simplified for marker
display: there is no noise class, every point lands in a cluster or stands
alone as a singleton. Distances are flat Euclidean in raw (lat, lng) degrees.
"""

import logging
from typing import List, Optional, Sequence, Set

import numpy as np

from memories.models import GeoPoint
from clustering.base import Clusterer, Cluster, ClusterParameters
from clustering.grid import build_grid_clusters
from clustering.utils import coords_array, distances_from, format_coord, centroid_latlng
from clustering.zoom import ZoomParameterTable, MAX_DETAIL_ZOOM, grid_precision

logger = logging.getLogger(__name__)


def density_groups(coords: np.ndarray, params: ClusterParameters) -> List[List[int]]:
    """Partition point indices by density reachability.

    Points are processed in input order. A point with at least
    ``min_points - 1`` neighbours within ``radius`` seeds a cluster that is
    expanded breadth-first through every neighbour that meets the same
    threshold. Points no expansion reaches become singletons.

    Args:
        coords: (n, 2) array of (lat, lng).
        params: Radius and minimum cluster size.

    Returns:
        Index groups, each ascending, ordered by their first index. Every
        index 0..n-1 appears in exactly one group.
    """
    n = len(coords)
    threshold = params.min_points - 1
    visited: Set[int] = set()
    assigned: Set[int] = set()
    groups: List[List[int]] = []

    def neighbors(i: int) -> List[int]:
        # Store order; computed at most once per point since callers gate on visited
        hits = np.flatnonzero(distances_from(coords, i) <= params.radius)
        return [int(j) for j in hits if j != i]

    def expand(seed: int, seed_neighbors: List[int]) -> List[int]:
        members = [seed]
        assigned.add(seed)
        frontier = list(seed_neighbors)
        queued = set(frontier)
        k = 0
        while k < len(frontier):
            j = frontier[k]
            k += 1
            if j not in visited:
                visited.add(j)
                reach = neighbors(j)
                if len(reach) >= threshold:
                    for m in reach:
                        if m not in queued:
                            queued.add(m)
                            frontier.append(m)
            if j not in assigned:
                assigned.add(j)
                members.append(j)
        return members

    for i in range(n):
        if i in visited:
            continue
        visited.add(i)
        reach = neighbors(i)
        if len(reach) >= threshold:
            groups.append(sorted(expand(i, reach)))

    for i in range(n):
        if i not in assigned:
            groups.append([i])

    groups.sort(key=lambda g: g[0])
    return groups


class DensityClustering(Clusterer):
    """Zoom-adaptive density clustering with grid fallback.

    Args:
        table: Zoom parameter table (default table if None).
        max_detail_zoom: At or above this zoom the grid fallback replaces the
            density result (default: 18).
        **kwargs: Additional arguments passed to Clusterer base class.

    Attributes:
        used_fallback: Whether the last fit() used the grid fallback.
        parameters_: ClusterParameters of the last fit().
    """

    def __init__(
        self,
        table: Optional[ZoomParameterTable] = None,
        max_detail_zoom: float = MAX_DETAIL_ZOOM,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.table = table or ZoomParameterTable()
        self.max_detail_zoom = max_detail_zoom
        self.method = "density"
        self.used_fallback: Optional[bool] = None
        self.parameters_: Optional[ClusterParameters] = None

        self.params.update({"max_detail_zoom": max_detail_zoom})

    def fit(self, points: Sequence[GeoPoint], zoom: float) -> "DensityClustering":
        """Cluster points for a zoom level.

        Args:
            points: Points in store order (validated upstream).
            zoom: Current map zoom level.

        Returns:
            self for method chaining.
        """
        points = list(points)
        params = self.table.parameters(zoom)
        self.parameters_ = params
        self.params.update({"zoom": zoom, "radius": params.radius, "min_points": params.min_points})

        groups = density_groups(coords_array(points), params)
        clusters = self._label_groups(points, groups, params)

        self.used_fallback = not clusters or zoom >= self.max_detail_zoom
        if self.used_fallback and points:
            precision = grid_precision(zoom)
            logger.info(
                "Grid fallback at zoom %s (precision %d) for %d memories",
                zoom, precision, len(points),
            )
            clusters = build_grid_clusters(points, precision)

        logger.debug(
            "zoom=%s radius=%s min_points=%d -> %d clusters from %d memories",
            zoom, params.radius, params.min_points, len(clusters), len(points),
        )
        self._finish(points, zoom, clusters)
        return self

    @staticmethod
    def _label_groups(
        points: List[GeoPoint],
        groups: List[List[int]],
        params: ClusterParameters,
    ) -> List[Cluster]:
        clusters = []
        cluster_id = 0
        for idx in groups:
            members = tuple(points[i] for i in idx)
            if len(idx) > 1 or params.min_points <= 1:
                lat, lng = centroid_latlng(members)
                key = f"cluster_{cluster_id}_{format_coord(lat, 6)}_{format_coord(lng, 6)}"
                cluster_id += 1
            else:
                p = members[0]
                key = f"single_{idx[0]}_{format_coord(p.lat, 6)}_{format_coord(p.lng, 6)}"
            clusters.append(Cluster(key=key, members=members, indices=tuple(idx)))
        return clusters
