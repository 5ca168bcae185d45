"""Unit tests for Web Mercator viewport projection."""

import math

import pytest

from memories import GeoPoint
from overlays import WebMercatorProjector, fit_view


@pytest.fixture
def view():
    """800x600 viewport centred on New York at zoom 12."""
    return WebMercatorProjector(40.7128, -74.0060, 12, 800, 600)


class TestWebMercatorProjector:
    """Test suite for project/unproject."""

    def test_center_maps_to_viewport_center(self, view):
        x, y = view.project(40.7128, -74.0060)
        assert x == pytest.approx(400.0)
        assert y == pytest.approx(300.0)

    def test_north_is_up_east_is_right(self, view):
        cx, cy = view.project(40.7128, -74.0060)
        x, y = view.project(40.72, -74.0)
        assert x > cx
        assert y < cy

    def test_scale_doubles_per_zoom(self, view):
        x12, _ = view.project(40.7128, -73.9)
        x13, _ = view.with_view(zoom=13).project(40.7128, -73.9)
        assert (x13 - 400.0) == pytest.approx(2 * (x12 - 400.0))

    def test_world_width_in_pixels(self):
        """Test 180 degrees of longitude span half of tile_size * 2**zoom px."""
        v = WebMercatorProjector(0.0, 0.0, 0, 256, 256)
        x0, _ = v.project(0.0, -90.0)
        x1, _ = v.project(0.0, 90.0)
        assert x1 - x0 == pytest.approx(128.0)

    def test_unproject_inverts_project(self, view):
        x, y = view.project(40.75, -73.98)
        lat, lng = view.unproject(x, y)
        assert lat == pytest.approx(40.75, abs=1e-9)
        assert lng == pytest.approx(-73.98, abs=1e-9)

    def test_not_ready_returns_none(self):
        v = WebMercatorProjector(0.0, 0.0, None, 800, 600)
        assert not v.ready
        assert v.project(1.0, 1.0) is None
        assert v.unproject(1.0, 1.0) is None
        assert WebMercatorProjector(0.0, 0.0, 3, 0, 600).project(1.0, 1.0) is None

    def test_non_finite_returns_none(self, view):
        assert view.project(math.nan, 0.0) is None

    def test_polar_latitudes_clamped(self, view):
        _, y90 = view.project(90.0, 0.0)
        _, ymax = view.project(85.05112878, 0.0)
        assert y90 == pytest.approx(ymax)

    def test_unproject_wraps_longitude(self):
        v = WebMercatorProjector(0.0, 179.9, 10, 800, 600)
        _, lng = v.unproject(800.0, 300.0)
        assert -180.0 <= lng < 180.0
        assert lng < 0

    def test_with_view(self, view):
        moved = view.with_view(center=(51.5, -0.12))
        assert (moved.center_lat, moved.center_lng, moved.zoom) == (51.5, -0.12, 12)
        assert view.center_lat == 40.7128


class TestFitView:
    """Test suite for fitting a viewport to points."""

    def test_all_points_inside_padding(self, close_pair):
        v = fit_view(close_pair, 800, 600, padding=32)
        for p in close_pair:
            x, y = v.project(p.lat, p.lng)
            assert 32 <= x <= 800 - 32
            assert 32 <= y <= 600 - 32

    def test_single_point_uses_max_zoom(self):
        v = fit_view([GeoPoint(10.0, 10.0)], 400, 300, max_zoom=17)
        assert v.zoom == 17
        assert v.project(10.0, 10.0) == pytest.approx((200.0, 150.0))

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="zero points"):
            fit_view([], 400, 300)
