"""Utility functions for clustering operations.

Provides helper functions for flat lat/lng distances, centroids, parameter
hashing, and exporting clusters as GeoDataFrames or JSON.
"""

import json
import hashlib
import os
from typing import Tuple, Set, Dict, Any, Sequence, List, Optional
import numpy as np
import pandas as pd
import geopandas as gpd
from shapely.geometry import Point, MultiPoint

from memories.models import GeoPoint


def coords_array(points: Sequence[GeoPoint]) -> np.ndarray:
    """Stack point coordinates into an (n, 2) array of (lat, lng)."""
    if not points:
        return np.empty((0, 2), dtype=float)
    return np.array([[p.lat, p.lng] for p in points], dtype=float)


def flat_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Euclidean distance in raw degree space.

    Not geodesic: the zoom radii were tuned against this flat metric and it
    distorts towards the poles.

    Example:
        >>> round(flat_distance(40.0, -74.0, 40.0003, -74.0004), 6)
        0.0005
    """
    return float(np.hypot(lat1 - lat2, lng1 - lng2))


def distances_from(coords: np.ndarray, index: int) -> np.ndarray:
    """Flat distances from coords[index] to every row of coords."""
    delta = coords - coords[index]
    return np.hypot(delta[:, 0], delta[:, 1])


def centroid_latlng(points: Sequence[GeoPoint]) -> Tuple[float, float]:
    """Mean (lat, lng) of points.

    Raises:
        ValueError: If points is empty.
    """
    if not points:
        raise ValueError("Cannot take the centroid of an empty cluster")
    coords = coords_array(points)
    mean = coords.mean(axis=0)
    return float(mean[0]), float(mean[1])


def format_coord(value: float, precision: int) -> str:
    """Fixed-precision coordinate text with negative zero folded to zero."""
    return f"{round(value, precision) + 0.0:.{precision}f}"


HYPERPARAM_KEYS: Dict[str, Set[str]] = {
    "density": {"zoom", "radius", "min_points", "max_detail_zoom"},
    "grid": {"zoom", "precision"},
}


def canonical_params_json(method: str, params: Dict[str, Any], include: Set[str]) -> str:
    """Create canonical JSON representation of hyperparameters.

    Args:
        method: Algorithm method name (e.g., "density", "grid").
        params: Dictionary of all parameters.
        include: Set of parameter keys to include in hash.

    Returns:
        Canonical JSON string (sorted keys, compact separators).

    Note:
        Only includes hyperparameters specified in `include` set.
        Always includes __method__ for cross-method collision prevention.
        Keys are sorted for deterministic output.
    """
    filtered = {k: params[k] for k in sorted(params.keys()) if k in include}
    filtered["__method__"] = method
    return json.dumps(filtered, sort_keys=True, separators=(",", ":"))


def param_hash_from_json(params_json: str) -> str:
    """Generate deterministic SHA-1 hash from parameter JSON.

    Args:
        params_json: Canonical JSON string of parameters.

    Returns:
        10-character hex digest of SHA-1 hash.
    """
    return hashlib.sha1(params_json.encode()).hexdigest()[:10]


def _cluster_geometry(members: Sequence[GeoPoint], mode: str):
    if mode == "centroid":
        lat, lng = centroid_latlng(members)
        return Point(lng, lat)
    elif mode == "hull":
        return MultiPoint([(p.lng, p.lat) for p in members]).convex_hull
    else:
        raise ValueError(f"Unknown geometry mode: {mode}")


def clusters_to_gdf(
    clusters: Sequence[Any],
    info: Optional[Dict[str, Any]] = None,
    geometry_mode: str = "centroid",
    rule: str = "last",
) -> gpd.GeoDataFrame:
    """Tabulate clusters as a GeoDataFrame in EPSG:4326.

    Args:
        clusters: Clusters from Clusterer.clusters().
        info: Optional Clusterer.info() dict; adds method/params columns.
        geometry_mode: "centroid" (member mean) or "hull" (convex hull).
        rule: Representative rule used for the representative columns.

    Returns:
        GeoDataFrame with columns key, count, member_ids, representative_id,
        representative_lat, representative_lng, has_image, geometry and,
        when info is given, method, params_hash, params_json, zoom.
    """
    from clustering.representative import select_representative

    columns = [
        "key", "count", "member_ids", "representative_id",
        "representative_lat", "representative_lng", "has_image",
    ]
    if not clusters:
        return gpd.GeoDataFrame(columns=columns, geometry=[], crs="EPSG:4326")

    rows = []
    geometries = []
    for cluster in clusters:
        rep = select_representative(cluster, rule=rule).representative
        rows.append({
            "key": cluster.key,
            "count": cluster.count,
            "member_ids": [p.id for p in cluster.members],
            "representative_id": rep.id,
            "representative_lat": rep.lat,
            "representative_lng": rep.lng,
            "has_image": rep.has_image,
        })
        geometries.append(_cluster_geometry(cluster.members, geometry_mode))

    gdf = gpd.GeoDataFrame(pd.DataFrame(rows, columns=columns), geometry=geometries, crs="EPSG:4326")

    if info is not None:
        gdf["method"] = info["method"]
        gdf["params_hash"] = info["params_hash"]
        gdf["params_json"] = info["params_json"]
        gdf["zoom"] = info["zoom"]

    return gdf


def clusters_to_records(
    clusters: Sequence[Any],
    info: Optional[Dict[str, Any]] = None,
    rule: str = "last",
) -> List[Dict[str, Any]]:
    """Convert clusters to plain JSON-ready dicts."""
    from clustering.representative import select_representative

    items = []
    for cluster in clusters:
        rep = select_representative(cluster, rule=rule).representative
        lat, lng = cluster.centroid
        item = {
            "key": cluster.key,
            "count": cluster.count,
            "centroid": {"lat": lat, "lng": lng},
            "representative": rep.to_dict(),
            "members": [p.to_dict() for p in cluster.members],
        }
        if info is not None:
            item["method"] = info["method"]
            item["params_hash"] = info["params_hash"]
            item["zoom"] = info["zoom"]
        items.append(item)
    return items


def clusters_to_json(
    clusters: Sequence[Any],
    out_path: str,
    info: Optional[Dict[str, Any]] = None,
    rule: str = "last",
) -> None:
    """Write clusters as a JSON array of objects.

    JSON Format:
        [{"key": ..., "count": ..., "centroid": {"lat": ..., "lng": ...},
          "representative": {...}, "members": [...]}, ...]
    """
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    items = clusters_to_records(clusters, info=info, rule=rule)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(items, f, ensure_ascii=False, indent=2)
