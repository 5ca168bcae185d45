"""Matplotlib overlay backend.

Draws cluster markers onto an Axes laid out in viewport pixels (origin
top-left, y down) so the same anchor arithmetic as the live map applies.
Used for static map snapshots.
"""

import os
from typing import List, Optional, Tuple

import matplotlib.pyplot as plt
from matplotlib import patches

from overlays.overlay import BaseOverlay, OverlaySpec, IMAGE, PIN, BADGE

TAIL_PX = 12
IMAGE_INSET_PX = 4
PIN_COLOR = "#E53935"
BADGE_COLOR = "#FF6B6B"
PLACEHOLDER_COLOR = "#FFE3D6"


class MatplotlibMapCanvas:
    """Figure whose single Axes spans a width x height px viewport.

    Args:
        width: Viewport width in px.
        height: Viewport height in px.
        dpi: Figure resolution; figure size is width/dpi by height/dpi inches.
        background: Fill colour standing in for map tiles.
    """

    def __init__(self, width: int, height: int, dpi: int = 100, background: str = "#F2EFE9"):
        self.width = width
        self.height = height
        self.dpi = dpi
        self.fig = plt.figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        self.fig.patch.set_facecolor(background)
        self.ax = self.fig.add_axes([0, 0, 1, 1])
        self._reset_limits()
        self.ax.set_axis_off()

    def _reset_limits(self) -> None:
        self.ax.set_xlim(0, self.width)
        self.ax.set_ylim(self.height, 0)

    def plot_points(self, pixels: List[Tuple[float, float]], color: str = "#7A7A7A") -> None:
        """Faint dots at raw memory positions (under all markers)."""
        if not pixels:
            return
        xs, ys = zip(*pixels)
        self.ax.scatter(xs, ys, s=6, c=color, alpha=0.5, zorder=0)
        self._reset_limits()

    def save(self, path: str) -> None:
        out_dir = os.path.dirname(path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        self._reset_limits()
        self.fig.savefig(path, dpi=self.dpi, facecolor=self.fig.get_facecolor())

    def close(self) -> None:
        plt.close(self.fig)


def _load_local_image(image_url: Optional[str]):
    if not image_url or "://" in image_url or not os.path.exists(image_url):
        return None
    try:
        return plt.imread(image_url)
    except (OSError, ValueError, SyntaxError):
        return None


class MatplotlibOverlay(BaseOverlay):
    """Marker or badge drawn as matplotlib artists.

    Artists are rebuilt on every move; zorder follows the overlay's z-index.
    """

    def __init__(self, spec: OverlaySpec):
        super().__init__(spec)
        self.artists: list = []
        self._image = _load_local_image(spec.image_url) if spec.kind == IMAGE else None

    def _on_attach(self, container) -> None:
        if self.box is not None:
            self._draw(self.box)

    def _on_move(self, box) -> None:
        self._remove_artists()
        self._draw(box)

    def _on_detach(self) -> None:
        self._remove_artists()

    def _remove_artists(self) -> None:
        for artist in self.artists:
            artist.remove()
        self.artists = []

    def _draw(self, box) -> None:
        ax = self.container
        left, top, w, h = box
        z = self.spec.z_index
        if self.spec.kind == IMAGE:
            self._draw_image_marker(ax, left, top, w, h, z)
        elif self.spec.kind == PIN:
            self._draw_pin(ax, left, top, w, h, z)
        elif self.spec.kind == BADGE:
            self._draw_badge(ax, left, top, w, h, z)
        else:
            raise ValueError(f"Unknown overlay kind: {self.spec.kind}")

    def _draw_image_marker(self, ax, left, top, w, h, z) -> None:
        body_h = h - TAIL_PX
        cx = left + w / 2.0
        body = patches.FancyBboxPatch(
            (left, top), w, body_h,
            boxstyle="round,pad=0,rounding_size=12",
            facecolor="white", edgecolor="white", linewidth=3, zorder=z,
        )
        tail = patches.Polygon(
            [(cx - 10, top + body_h), (cx + 10, top + body_h), (cx, top + h)],
            closed=True, facecolor="white", edgecolor="none", zorder=z,
        )
        ax.add_patch(body)
        ax.add_patch(tail)
        self.artists.extend([body, tail])

        x0, x1 = left + IMAGE_INSET_PX, left + w - IMAGE_INSET_PX
        y0, y1 = top + IMAGE_INSET_PX, top + body_h - IMAGE_INSET_PX
        if self._image is not None:
            img = ax.imshow(
                self._image, extent=(x0, x1, y1, y0), origin="upper",
                aspect="auto", zorder=z + 0.5, interpolation="bilinear",
            )
            self.artists.append(img)
        else:
            fill = patches.FancyBboxPatch(
                (x0, y0), x1 - x0, y1 - y0,
                boxstyle="round,pad=0,rounding_size=9",
                facecolor=PLACEHOLDER_COLOR, edgecolor="none", zorder=z + 0.5,
            )
            ax.add_patch(fill)
            self.artists.append(fill)

    def _draw_pin(self, ax, left, top, w, h, z) -> None:
        cx = left + w / 2.0
        radius = w * 0.3
        head_cy = top + radius + 2
        tip = patches.Polygon(
            [(cx - radius * 0.85, head_cy + radius * 0.5),
             (cx + radius * 0.85, head_cy + radius * 0.5),
             (cx, top + h)],
            closed=True, facecolor=PIN_COLOR, edgecolor="none", zorder=z,
        )
        head = patches.Circle((cx, head_cy), radius, facecolor=PIN_COLOR, edgecolor="none", zorder=z)
        dot = patches.Circle((cx, head_cy), radius * 0.4, facecolor="white", edgecolor="none", zorder=z + 0.1)
        for artist in (tip, head, dot):
            ax.add_patch(artist)
            self.artists.append(artist)

    def _draw_badge(self, ax, left, top, w, h, z) -> None:
        pill = patches.FancyBboxPatch(
            (left, top), w, h,
            boxstyle=f"round,pad=0,rounding_size={h / 2.0}",
            facecolor=BADGE_COLOR, edgecolor="white", linewidth=2, zorder=z,
        )
        ax.add_patch(pill)
        label = ax.text(
            left + w / 2.0, top + h / 2.0, self.spec.text or "",
            ha="center", va="center", color="white", fontweight="bold",
            fontsize=7, zorder=z + 0.1,
        )
        self.artists.extend([pill, label])
