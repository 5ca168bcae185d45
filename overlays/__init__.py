"""Marker overlays for clustered memories.

Turns clusters into anchored screen overlays: a primary marker per cluster
and a "+N" count badge for multi-member clusters, redrawn in full on every
recomputation.

Modules:
    projection: Projector protocol and Web Mercator viewport projection
    overlay: Overlay capability interface, marker geometry and specs
    renderer: OverlayRenderer (full redraw, click routing)
    recording: In-memory backend
    mpl_backend: Matplotlib backend for static snapshots
    layer: ClusterLayer reacting to zoom, data, pan and click events
"""

from .projection import (
    Projector,
    WebMercatorProjector,
    fit_view,
)

from .overlay import (
    IMAGE,
    PIN,
    BADGE,
    MarkerGeometry,
    MarkerStyle,
    OverlaySpec,
    Overlay,
    BaseOverlay,
    overlay_specs,
    badge_text,
)

from .renderer import (
    OverlayRenderer,
    MarkerAnchor,
)

from .recording import (
    RecordingSurface,
    RecordingOverlay,
)

from .layer import ClusterLayer, DEFAULT_ZOOM

__all__ = [
    'Projector',
    'WebMercatorProjector',
    'fit_view',
    'IMAGE',
    'PIN',
    'BADGE',
    'MarkerGeometry',
    'MarkerStyle',
    'OverlaySpec',
    'Overlay',
    'BaseOverlay',
    'overlay_specs',
    'badge_text',
    'OverlayRenderer',
    'MarkerAnchor',
    'RecordingSurface',
    'RecordingOverlay',
    'ClusterLayer',
    'DEFAULT_ZOOM',
]
