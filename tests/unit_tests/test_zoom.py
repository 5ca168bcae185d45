"""Unit tests for the zoom parameter table and grid precision."""

import math

import pytest

from clustering import (
    ClusterParameters,
    ZoomTier,
    ZoomParameterTable,
    parameters_for_zoom,
    grid_precision,
)
from memories import default_config


class TestParametersForZoom:
    """Test suite for the default zoom -> (radius, min_points) table."""

    @pytest.mark.parametrize("zoom,radius,min_points", [
        (20, 0.0001, 2),
        (16, 0.0001, 2),
        (15.9, 0.0005, 2),
        (14, 0.0005, 2),
        (12, 0.002, 2),
        (11, 0.008, 2),
        (10, 0.008, 2),
        (8, 0.03, 2),
        (7, 0.12, 3),
        (6, 0.12, 3),
        (5.99, 0.5, 3),
        (0, 0.5, 3),
        (-3, 0.5, 3),
    ])
    def test_tiers(self, zoom, radius, min_points):
        assert parameters_for_zoom(zoom) == ClusterParameters(radius, min_points)

    def test_radius_never_grows_with_zoom(self):
        """Test radius is non-increasing as zoom rises."""
        zooms = [z / 4.0 for z in range(-8, 96)]
        radii = [parameters_for_zoom(z).radius for z in zooms]
        assert all(a >= b for a, b in zip(radii, radii[1:]))

    def test_from_default_config_matches_default_table(self):
        table = ZoomParameterTable.from_config(default_config())
        for z in range(0, 22):
            assert table.parameters(z) == parameters_for_zoom(z)

    def test_to_config_round_trip(self):
        table = ZoomParameterTable()
        cfg = {"clustering": {"zoom_tiers": table.to_config()}}
        assert ZoomParameterTable.from_config(cfg).tiers == table.tiers

    def test_custom_table(self):
        """Test a config override replaces the default tiers."""
        table = ZoomParameterTable.from_config({"clustering": {"zoom_tiers": [[10, 0.01, 2], [None, 1.0, 4]]}})
        assert table.parameters(12) == ClusterParameters(0.01, 2)
        assert table.parameters(3) == ClusterParameters(1.0, 4)


class TestZoomTableValidation:
    """Test suite for rejecting malformed tables."""

    def test_empty(self):
        with pytest.raises(ValueError, match="at least one tier"):
            ZoomParameterTable([])

    @pytest.mark.parametrize("radius", [0.0, -1.0, math.inf, math.nan])
    def test_bad_radius(self, radius):
        with pytest.raises(ValueError, match="radius"):
            ZoomParameterTable([ZoomTier(None, radius, 2)])

    def test_bad_min_points(self):
        with pytest.raises(ValueError, match="min_points"):
            ZoomParameterTable([ZoomTier(None, 0.1, 0)])

    def test_catch_all_must_be_last(self):
        with pytest.raises(ValueError, match="only the last tier"):
            ZoomParameterTable([ZoomTier(None, 0.1, 2), ZoomTier(5, 0.2, 2)])

    def test_out_of_order(self):
        with pytest.raises(ValueError, match="ordered"):
            ZoomParameterTable([ZoomTier(5, 0.1, 2), ZoomTier(10, 0.2, 2), ZoomTier(None, 0.3, 2)])

    def test_shrinking_radius(self):
        with pytest.raises(ValueError, match="shrink"):
            ZoomParameterTable([ZoomTier(10, 0.1, 2), ZoomTier(None, 0.05, 2)])

    def test_wrong_entry_length(self):
        with pytest.raises(ValueError, match="min_zoom, radius, min_points"):
            ZoomParameterTable.from_config({"clustering": {"zoom_tiers": [[10, 0.1]]}})


class TestGridPrecision:
    """Test suite for the grid fallback rounding."""

    @pytest.mark.parametrize("zoom,precision", [
        (18, 6),
        (21, 6),
        (15, 5),
        (12, 4),
        (9, 3),
        (2, 0),
        (-1, 0),
    ])
    def test_precision(self, zoom, precision):
        assert grid_precision(zoom) == precision

    def test_non_finite(self):
        assert grid_precision(math.inf) == 6
        assert grid_precision(-math.inf) == 0
