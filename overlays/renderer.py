"""Overlay renderer and anchor projector.

Draws one primary marker per cluster plus a "+N" badge for multi-member
clusters. Every pass is a full redraw: all overlays from the previous pass
are detached before the new ones are attached.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Any, Union

from memories.models import GeoPoint
from clustering.base import Cluster
from clustering.representative import Representative, select_representatives
from overlays.overlay import Overlay, OverlaySpec, MarkerStyle, overlay_specs
from overlays.projection import Projector

logger = logging.getLogger(__name__)

ProjectFn = Callable[[float, float], Optional[Tuple[float, float]]]
MarkerClickFn = Callable[[GeoPoint, List[GeoPoint]], None]
OverlayFactory = Callable[[OverlaySpec], Overlay]


@dataclass(frozen=True)
class MarkerAnchor:
    """Resolved placement of one cluster marker for the current pass."""

    cluster: Cluster
    representative: GeoPoint
    screen_position: Tuple[float, float]


def _project_fn(projector: Union[Projector, ProjectFn]) -> ProjectFn:
    return getattr(projector, "project", projector)


class OverlayRenderer:
    """Owns the drawn overlay list for one map surface.

    Args:
        container: Backend surface overlays attach to (matplotlib Axes,
            RecordingSurface, host pane, ...).
        overlay_factory: Builds a backend overlay from an OverlaySpec.
        on_marker_click: Called with (representative, members) when a
            primary marker is clicked.
        style: Marker geometry (defaults if None).
        rule: Representative rule ("last" or "most_recent").
    """

    def __init__(
        self,
        container: Any,
        overlay_factory: OverlayFactory,
        on_marker_click: Optional[MarkerClickFn] = None,
        style: Optional[MarkerStyle] = None,
        rule: str = "last",
    ):
        self.container = container
        self.overlay_factory = overlay_factory
        self.on_marker_click = on_marker_click
        self.style = style or MarkerStyle()
        self.rule = rule
        self.overlays: List[Overlay] = []
        self.anchors: List[MarkerAnchor] = []

    def clear(self) -> None:
        """Detach every overlay drawn by the previous pass."""
        for overlay in self.overlays:
            overlay.detach()
        self.overlays = []
        self.anchors = []

    def render(
        self,
        clusters: Sequence[Cluster],
        projector: Union[Projector, ProjectFn],
    ) -> List[MarkerAnchor]:
        """Redraw markers for a fresh cluster set.

        Clusters whose representative does not project (projector returns
        None) are skipped; the rest of the pass is unaffected.

        Args:
            clusters: Clusters from the current recomputation.
            projector: Projector or bare project(lat, lng) callable.

        Returns:
            Anchors of the markers actually drawn.
        """
        self.clear()
        project = _project_fn(projector)
        skipped = 0

        for target in select_representatives(clusters, rule=self.rule):
            rep = target.representative
            pos = project(rep.lat, rep.lng)
            if pos is None:
                skipped += 1
                logger.debug("No projection for %s at (%s, %s); skipping", target.cluster.key, rep.lat, rep.lng)
                continue
            for spec in overlay_specs(target, self.style):
                overlay = self.overlay_factory(spec)
                overlay.attach(self.container)
                overlay.update_position(*pos)
                self.overlays.append(overlay)
            self.anchors.append(MarkerAnchor(target.cluster, rep, pos))

        logger.debug(
            "Drew %d overlays for %d clusters (%d skipped)",
            len(self.overlays), len(clusters), skipped,
        )
        return self.anchors

    def reposition(self, projector: Union[Projector, ProjectFn]) -> None:
        """Move existing overlays after a pan without reclustering.

        Overlays whose anchor no longer projects are left where they were.
        """
        project = _project_fn(projector)
        anchors = []
        for anchor in self.anchors:
            rep = anchor.representative
            pos = project(rep.lat, rep.lng)
            if pos is None:
                anchors.append(anchor)
                continue
            for overlay in self.overlays:
                if overlay.spec.target.cluster is anchor.cluster:
                    overlay.update_position(*pos)
            anchors.append(MarkerAnchor(anchor.cluster, rep, pos))
        self.anchors = anchors

    def hit_test(self, px: float, py: float) -> Optional[Representative]:
        """Top-most clickable overlay under a pixel.

        Higher z-index wins; among equals the later-drawn overlay wins.
        """
        ordered = sorted(
            enumerate(self.overlays),
            key=lambda item: (item[1].spec.z_index, item[0]),
            reverse=True,
        )
        for _, overlay in ordered:
            if overlay.spec.clickable and overlay.contains(px, py):
                return overlay.spec.target
        return None

    def click(self, px: float, py: float) -> bool:
        """Route a click to the marker under it.

        Returns:
            True if a marker was hit (the click is consumed).
        """
        target = self.hit_test(px, py)
        if target is None:
            return False
        if self.on_marker_click is not None:
            self.on_marker_click(target.representative, list(target.members))
        return True
