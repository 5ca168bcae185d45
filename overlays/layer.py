"""Cluster layer: glue between host map events and the clustering core.

The host map reports zoom changes, data changes, pans and clicks; the layer
reclusters synchronously on zoom/data changes, repositions on pans, and
routes clicks either to a marker or, on bare map, back out as coordinates.
"""

import logging
from typing import Callable, Optional, Sequence, Tuple, List

from memories.models import GeoPoint
from clustering.base import Clusterer, Cluster
from clustering.density import DensityClustering
from overlays.renderer import OverlayRenderer, MarkerAnchor
from overlays.projection import Projector

logger = logging.getLogger(__name__)

DEFAULT_ZOOM = 12

MapClickFn = Callable[[float, float], None]


class ClusterLayer:
    """Clustered marker layer bound to one map view.

    Args:
        renderer: Renderer owning the drawn overlays.
        projector: Current view projection (project/unproject).
        clusterer: Grouping algorithm (DensityClustering if None).
        on_map_click: Called with (lat, lng) for clicks on bare map.
        default_zoom: Zoom used while the host reports none.
    """

    def __init__(
        self,
        renderer: OverlayRenderer,
        projector: Projector,
        clusterer: Optional[Clusterer] = None,
        on_map_click: Optional[MapClickFn] = None,
        default_zoom: float = DEFAULT_ZOOM,
    ):
        self.renderer = renderer
        self.projector = projector
        self.clusterer = clusterer or DensityClustering()
        self.on_map_click = on_map_click
        self.default_zoom = default_zoom
        self.points: Tuple[GeoPoint, ...] = ()
        host_zoom = getattr(projector, "zoom", None)
        self.zoom: float = host_zoom if host_zoom is not None else default_zoom
        self.clusters: List[Cluster] = []

    @property
    def anchors(self) -> List[MarkerAnchor]:
        return self.renderer.anchors

    def set_points(self, points: Sequence[GeoPoint]) -> List[MarkerAnchor]:
        """Replace the point set (after a full load) and redraw."""
        self.points = tuple(points)
        return self.refresh()

    def set_zoom(self, zoom: Optional[float]) -> List[MarkerAnchor]:
        """Handle a zoom change from the host and redraw.

        A missing zoom (host not ready) clusters at default_zoom but leaves
        the projector alone, so nothing is drawn until the host reports one.
        """
        if zoom is None:
            self.zoom = self.default_zoom
        else:
            self.zoom = zoom
            with_view = getattr(self.projector, "with_view", None)
            if with_view is not None:
                self.projector = with_view(zoom=zoom)
        return self.refresh()

    def set_projector(self, projector: Projector) -> List[MarkerAnchor]:
        """Handle a new view from the host.

        A zoom change reclusters. Otherwise existing overlays are moved, and
        clusters a previous pass could not project are drawn afresh.
        """
        self.projector = projector
        host_zoom = getattr(projector, "zoom", None)
        if host_zoom is not None and host_zoom != self.zoom:
            self.zoom = host_zoom
            return self.refresh()
        if len(self.renderer.anchors) < len(self.clusters):
            return self.renderer.render(self.clusters, projector)
        self.renderer.reposition(projector)
        return self.renderer.anchors

    def refresh(self) -> List[MarkerAnchor]:
        """Recluster from scratch and perform a full redraw."""
        self.clusters = self.clusterer.fit(self.points, self.zoom).clusters()
        return self.renderer.render(self.clusters, self.projector)

    def handle_click(self, px: float, py: float) -> Optional[Tuple[float, float]]:
        """Route a click at a viewport pixel.

        Returns:
            (lat, lng) passed to on_map_click for a bare-map click, or None
            if a marker consumed the click or the view cannot unproject.
        """
        if self.renderer.click(px, py):
            return None
        latlng = self.projector.unproject(px, py)
        if latlng is None:
            logger.debug("Click at (%s, %s) outside a valid projection", px, py)
            return None
        if self.on_map_click is not None:
            self.on_map_click(*latlng)
        return latlng
