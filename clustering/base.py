"""Base clustering interface for map marker grouping.

Defines the value types shared by all groupers (ClusterParameters, Cluster)
and the abstract base class Clusterer with its fit, clusters, labels and
info operations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any, Tuple, List, Sequence
from datetime import datetime
import numpy as np

from memories.models import GeoPoint
from clustering.utils import (
    centroid_latlng,
    canonical_params_json,
    param_hash_from_json,
    HYPERPARAM_KEYS,
)


@dataclass(frozen=True)
class ClusterParameters:
    """Clustering parameters for one zoom level.

    Attributes:
        radius: Neighbourhood radius in degrees of lat/lng.
        min_points: Minimum cluster size, counting the point itself.
    """

    radius: float
    min_points: int


@dataclass(frozen=True)
class Cluster:
    """Group of memories drawn as one marker.

    Attributes:
        key: Label describing how the group was formed
            (``cluster_*``, ``single_*`` or ``grid_*``).
        members: Member points in store order.
        indices: Store positions of the members, ascending.
    """

    key: str
    members: Tuple[GeoPoint, ...]
    indices: Tuple[int, ...]

    @property
    def count(self) -> int:
        return len(self.members)

    @property
    def centroid(self) -> Tuple[float, float]:
        """Mean (lat, lng) of the members."""
        return centroid_latlng(self.members)

    def __len__(self) -> int:
        return len(self.members)


class Clusterer(ABC):
    """Abstract base class for marker grouping algorithms.

    All groupers partition the input points: every point ends up in exactly
    one Cluster, there is no noise label.

    Attributes:
        params: Dictionary of algorithm-specific parameters.
        clusters_: Clusters from the last fit() (None until fitted).
        labels_: Cluster index per input point (None until fitted).
        zoom: Zoom level of the last fit().
        n_samples: Number of points in the last fit().
        data_bbox: Bounding box of the last input (min_lng, min_lat, max_lng, max_lat).
    """

    def __init__(self, **params):
        self.params = params
        self.clusters_: Optional[List[Cluster]] = None
        self.labels_: Optional[np.ndarray] = None
        self.zoom: Optional[float] = None
        self.n_samples: Optional[int] = None
        self.data_bbox: Optional[Tuple[float, float, float, float]] = None

        # Store method name (set by subclasses)
        self.method: Optional[str] = None

    @abstractmethod
    def fit(self, points: Sequence[GeoPoint], zoom: float) -> "Clusterer":
        """Group points for the given zoom level and populate clusters_.

        Args:
            points: Points in store order.
            zoom: Current map zoom level.

        Returns:
            self for method chaining.
        """
        pass

    def clusters(self) -> List[Cluster]:
        """Return clusters from the last fit.

        Raises:
            RuntimeError: If model has not been fitted.
        """
        if self.clusters_ is None:
            raise RuntimeError("Model not fitted. Run .fit() first.")
        return self.clusters_

    def labels(self) -> np.ndarray:
        """Return the cluster index of every input point.

        Raises:
            RuntimeError: If model has not been fitted.
        """
        if self.labels_ is None:
            raise RuntimeError("Model not fitted. Run .fit() first.")
        return self.labels_

    def _finish(self, points: Sequence[GeoPoint], zoom: float, clusters: List[Cluster]) -> None:
        """Store fit results and derive labels/bbox."""
        self.zoom = zoom
        self.n_samples = len(points)
        self.clusters_ = clusters
        labels = np.full(len(points), -1, dtype=int)
        for label, cluster in enumerate(clusters):
            labels[list(cluster.indices)] = label
        self.labels_ = labels
        if points:
            lats = [p.lat for p in points]
            lngs = [p.lng for p in points]
            self.data_bbox = (min(lngs), min(lats), max(lngs), max(lats))
        else:
            self.data_bbox = None

    def info(self) -> Dict[str, Any]:
        """Return clusterer information.

        Returns:
            Dictionary with method name, params, params_json, params_hash,
            zoom, n_samples, n_clusters, data_bbox, timestamp.

        Note:
            Can be called before fitting, but zoom, n_samples, n_clusters and
            data_bbox will be None if not yet fitted.
        """
        if self.method is None:
            raise RuntimeError("Method name not set. This should not happen.")

        include = HYPERPARAM_KEYS.get(self.method, set())
        params_json = canonical_params_json(self.method, self.params, include)
        params_hash = param_hash_from_json(params_json)

        n_clusters = len(self.clusters_) if self.clusters_ is not None else None

        return {
            "method": self.method,
            "params": self.params,
            "params_json": params_json,
            "params_hash": params_hash,
            "zoom": self.zoom,
            "n_samples": self.n_samples,
            "n_clusters": n_clusters,
            "data_bbox": self.data_bbox,
            "timestamp": datetime.now().isoformat(),
        }
