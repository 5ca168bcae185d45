"""Unit tests for the matplotlib overlay backend."""

import numpy as np
import matplotlib.pyplot as plt
import pytest

from clustering import DensityClustering
from memories import GeoPoint
from overlays import OverlayRenderer, BADGE
from overlays.mpl_backend import MatplotlibMapCanvas, MatplotlibOverlay


@pytest.fixture
def canvas():
    c = MatplotlibMapCanvas(400, 300)
    yield c
    c.close()


class TestMatplotlibBackend:
    """Test suite for drawing markers on a pixel-space Axes."""

    def test_axes_in_viewport_pixels(self, canvas):
        assert canvas.ax.get_xlim() == (0.0, 400.0)
        assert canvas.ax.get_ylim() == (300.0, 0.0)

    def test_render_and_save(self, tmp_path, canvas, close_pair, toy_project):
        """Test a pass draws artists for marker and badge and saves a PNG."""
        renderer = OverlayRenderer(canvas.ax, MatplotlibOverlay)
        renderer.render(DensityClustering().fit(close_pair, 12).clusters(), toy_project)
        assert all(o.artists for o in renderer.overlays)
        badge = [o for o in renderer.overlays if o.spec.kind == BADGE][0]
        assert min(a.get_zorder() for a in badge.artists) == 1001

        path = tmp_path / "snap" / "markers.png"
        canvas.save(str(path))
        assert path.exists() and path.stat().st_size > 0

    def test_redraw_removes_old_artists(self, canvas, close_pair, toy_project):
        renderer = OverlayRenderer(canvas.ax, MatplotlibOverlay)
        model = DensityClustering()
        renderer.render(model.fit(close_pair, 12).clusters(), toy_project)
        renderer.render(model.fit(close_pair, 16).clusters(), toy_project)
        n_patches = len(canvas.ax.patches)
        renderer.render(model.fit(close_pair, 16).clusters(), toy_project)
        assert len(canvas.ax.patches) == n_patches

    def test_local_image_drawn(self, tmp_path, canvas):
        """Test an image marker embeds a readable local photo."""
        img_path = tmp_path / "photo.png"
        plt.imsave(str(img_path), np.zeros((8, 8, 3)))
        points = [GeoPoint(40.0, -74.0, image_url=str(img_path))]
        renderer = OverlayRenderer(canvas.ax, MatplotlibOverlay)
        renderer.render(DensityClustering().fit(points, 12).clusters(), lambda lat, lng: (200.0, 250.0))
        assert len(canvas.ax.images) == 1

    def test_remote_image_uses_placeholder(self, canvas):
        points = [GeoPoint(40.0, -74.0, image_url="https://example.com/a.jpg")]
        renderer = OverlayRenderer(canvas.ax, MatplotlibOverlay)
        renderer.render(DensityClustering().fit(points, 12).clusters(), lambda lat, lng: (200.0, 250.0))
        assert len(canvas.ax.images) == 0
        assert len(renderer.overlays[0].artists) == 3
