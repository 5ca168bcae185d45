"""Zoom-adaptive clustering of memory points for map display.

Provides the zoom parameter table, the density clustering engine with its
grid fallback, representative selection, and export helpers behind one
consistent interface.
"""

from typing import Optional, Sequence, List

from clustering.base import Clusterer, Cluster, ClusterParameters
from clustering.zoom import (
    ZoomTier,
    ZoomParameterTable,
    DEFAULT_ZOOM_TIERS,
    MAX_DETAIL_ZOOM,
    parameters_for_zoom,
    grid_precision,
)
from clustering.density import DensityClustering, density_groups
from clustering.grid import GridClustering, grid_key, grid_groups
from clustering.representative import (
    Representative,
    REPRESENTATIVE_RULES,
    select_representative,
    select_representatives,
)
from clustering.utils import (
    flat_distance,
    centroid_latlng,
    canonical_params_json,
    param_hash_from_json,
    HYPERPARAM_KEYS,
    clusters_to_gdf,
    clusters_to_records,
    clusters_to_json,
)
from memories.models import GeoPoint


def make_clusterer(name: str, **kwargs) -> Clusterer:
    """Factory function to create clusterer instances.

    Args:
        name: Algorithm name ("density" or "grid").
        **kwargs: Algorithm-specific parameters.

    Returns:
        Clusterer instance.

    Raises:
        ValueError: If algorithm name is unknown.

    Examples:
        >>> clusterer = make_clusterer("density")
        >>> clusterer = make_clusterer("grid", precision=4)
    """
    if name == "density":
        return DensityClustering(**kwargs)
    elif name == "grid":
        return GridClustering(**kwargs)
    else:
        raise ValueError(f"Unknown algorithm: {name}. Must be one of: density, grid")


def clusterer_from_config(cfg: dict) -> DensityClustering:
    """Build the density clusterer described by a loaded config."""
    section = cfg.get("clustering", {})
    return DensityClustering(
        table=ZoomParameterTable.from_config(cfg),
        max_detail_zoom=section.get("max_detail_zoom", MAX_DETAIL_ZOOM),
    )


def cluster_points(
    points: Sequence[GeoPoint],
    zoom: float,
    cfg: Optional[dict] = None,
) -> List[Cluster]:
    """Cluster points for one render pass.

    Args:
        points: Points in store order.
        zoom: Current map zoom level.
        cfg: Loaded configuration (defaults if None).

    Returns:
        Clusters partitioning the input points.
    """
    clusterer = clusterer_from_config(cfg) if cfg is not None else DensityClustering()
    return clusterer.fit(points, zoom).clusters()


__all__ = [
    "Clusterer",
    "Cluster",
    "ClusterParameters",
    "ZoomTier",
    "ZoomParameterTable",
    "DEFAULT_ZOOM_TIERS",
    "MAX_DETAIL_ZOOM",
    "parameters_for_zoom",
    "grid_precision",
    "DensityClustering",
    "density_groups",
    "GridClustering",
    "grid_key",
    "grid_groups",
    "Representative",
    "REPRESENTATIVE_RULES",
    "select_representative",
    "select_representatives",
    "make_clusterer",
    "clusterer_from_config",
    "cluster_points",
    "flat_distance",
    "centroid_latlng",
    "canonical_params_json",
    "param_hash_from_json",
    "HYPERPARAM_KEYS",
    "clusters_to_gdf",
    "clusters_to_records",
    "clusters_to_json",
]
