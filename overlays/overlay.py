"""Overlay capability interface and marker geometry.

An Overlay is one screen element anchored to a geographic point. Backends
(in-memory, matplotlib, a host map widget) implement attach, update_position
and detach; the clustering and selection logic never sees the backend.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, List, Protocol, Any

from clustering.representative import Representative

IMAGE = "image"
PIN = "pin"
BADGE = "badge"


@dataclass(frozen=True)
class MarkerGeometry:
    """Footprint and badge placement for one primary-marker variant.

    The marker's bottom-centre sits on the anchor pixel, so its top-left
    corner is at (x - width/2, y - height).
    """

    width: float
    height: float
    badge_offset: Tuple[float, float]


@dataclass(frozen=True)
class MarkerStyle:
    image: MarkerGeometry = MarkerGeometry(56, 56, (18, -68))
    pin: MarkerGeometry = MarkerGeometry(40, 40, (12, -45))
    badge_min_width: float = 20
    badge_height: float = 20
    badge_z: int = 1001
    single_z: int = 1
    multi_z: int = 10

    @classmethod
    def from_config(cls, cfg: dict) -> "MarkerStyle":
        """Build from the ``markers`` config section."""
        m = cfg.get("markers", {})
        if not m:
            return cls()
        image = m.get("image", {})
        pin = m.get("pin", {})
        badge = m.get("badge", {})
        z = m.get("z_index", {})
        default = cls()
        return cls(
            image=MarkerGeometry(
                image.get("width", default.image.width),
                image.get("height", default.image.height),
                tuple(image.get("badge_offset", default.image.badge_offset)),
            ),
            pin=MarkerGeometry(
                pin.get("width", default.pin.width),
                pin.get("height", default.pin.height),
                tuple(pin.get("badge_offset", default.pin.badge_offset)),
            ),
            badge_min_width=badge.get("min_width", default.badge_min_width),
            badge_height=badge.get("height", default.badge_height),
            badge_z=badge.get("z_index", default.badge_z),
            single_z=z.get("single", default.single_z),
            multi_z=z.get("multi", default.multi_z),
        )


@dataclass(frozen=True)
class OverlaySpec:
    """What to draw for one overlay, independent of backend.

    Attributes:
        kind: IMAGE, PIN or BADGE.
        target: Cluster the overlay belongs to.
        offset: Top-left corner relative to the anchor pixel.
        size: (width, height) in logical px.
        z_index: Stacking order, higher draws on top.
        text: Badge label (badges only).
        image_url: Image for IMAGE markers.
    """

    kind: str
    target: Representative
    offset: Tuple[float, float]
    size: Tuple[float, float]
    z_index: int
    text: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def clickable(self) -> bool:
        return self.kind != BADGE


def badge_text(count: int) -> str:
    """Label for a cluster of ``count`` members.

    Example:
        >>> badge_text(4)
        '+3'
    """
    return f"+{count - 1}"


def badge_width(text: str, style: MarkerStyle) -> float:
    # Pill grows with the label: ~7 px per glyph plus 2x4 px padding
    return max(style.badge_min_width, 7.0 * len(text) + 8.0)


def overlay_specs(target: Representative, style: Optional[MarkerStyle] = None) -> List[OverlaySpec]:
    """Primary marker plus, for multi-member clusters, a count badge.

    Args:
        target: Cluster with its chosen representative.
        style: Marker geometry (defaults if None).

    Returns:
        One or two specs, primary marker first.
    """
    style = style or MarkerStyle()
    rep = target.representative
    is_image = rep.has_image
    geom = style.image if is_image else style.pin
    primary_z = style.multi_z if target.count > 1 else style.single_z

    specs = [OverlaySpec(
        kind=IMAGE if is_image else PIN,
        target=target,
        offset=(-geom.width / 2.0, -geom.height),
        size=(geom.width, geom.height),
        z_index=primary_z,
        image_url=rep.image_url if is_image else None,
    )]

    if target.count > 1:
        text = badge_text(target.count)
        specs.append(OverlaySpec(
            kind=BADGE,
            target=target,
            offset=geom.badge_offset,
            size=(badge_width(text, style), style.badge_height),
            z_index=style.badge_z,
            text=text,
        ))
    return specs


class Overlay(Protocol):
    spec: OverlaySpec

    def attach(self, container: Any) -> None: ...
    def update_position(self, px: float, py: float) -> None: ...
    def detach(self) -> None: ...
    def contains(self, px: float, py: float) -> bool: ...


class BaseOverlay:
    """Position bookkeeping shared by overlay backends.

    Subclasses implement _on_attach, _on_move and _on_detach.
    """

    def __init__(self, spec: OverlaySpec):
        self.spec = spec
        self.container: Any = None
        self.anchor: Optional[Tuple[float, float]] = None
        self.box: Optional[Tuple[float, float, float, float]] = None

    @property
    def attached(self) -> bool:
        return self.container is not None

    def attach(self, container: Any) -> None:
        if self.attached:
            raise RuntimeError("Overlay is already attached")
        self.container = container
        self._on_attach(container)

    def update_position(self, px: float, py: float) -> None:
        """Place the overlay relative to the projected anchor pixel."""
        dx, dy = self.spec.offset
        w, h = self.spec.size
        self.anchor = (px, py)
        self.box = (px + dx, py + dy, w, h)
        if self.attached:
            self._on_move(self.box)

    def detach(self) -> None:
        if not self.attached:
            return
        self._on_detach()
        self.container = None

    def contains(self, px: float, py: float) -> bool:
        if self.box is None:
            return False
        left, top, w, h = self.box
        return left <= px <= left + w and top <= py <= top + h

    def _on_attach(self, container: Any) -> None:
        raise NotImplementedError

    def _on_move(self, box: Tuple[float, float, float, float]) -> None:
        raise NotImplementedError

    def _on_detach(self) -> None:
        raise NotImplementedError
