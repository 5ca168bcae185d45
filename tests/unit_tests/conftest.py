"""Pytest fixtures for memory map unit tests.

This module provides shared fixtures for testing individual functions
in isolation across the memories, clustering and overlays packages.
"""

import json

import matplotlib
matplotlib.use('Agg')

import pytest

from memories.models import GeoPoint
from overlays.recording import RecordingSurface, RecordingOverlay
from overlays.renderer import OverlayRenderer


@pytest.fixture
def close_pair():
    """Two points about 11 m apart plus one far away (zoom 12 example).

    Returns:
        list[GeoPoint]: p1 and p2 within 0.002 deg, p3 roughly 0.4 deg off.
    """
    return [
        GeoPoint(40.0000, -74.0000, id="p1", image_url="a.jpg"),
        GeoPoint(40.0001, -74.0001, id="p2"),
        GeoPoint(40.5000, -74.2000, id="p3"),
    ]


@pytest.fixture
def line_points():
    """Points on a meridian, spaced so that grouping changes with zoom.

    Gaps (deg): 0.00005, 0.0003, 0.0015, 0.006, 0.02.
    """
    lats = [40.0, 40.00005, 40.00035, 40.00185, 40.00785, 40.02785]
    return [GeoPoint(lat, -74.0, id=f"l{i}") for i, lat in enumerate(lats)]


@pytest.fixture
def dated_points():
    """Three stacked memories with mixed visit dates."""
    return [
        GeoPoint(40.0, -74.0, id="a", visit_date="2024-05-01", image_url="a.jpg"),
        GeoPoint(40.0, -74.0, id="b", visit_date="2024-07-15T10:00:00Z"),
        GeoPoint(40.0, -74.0, id="c"),
    ]


@pytest.fixture
def sample_records():
    """Mixed app-style and backend-style memory records."""
    return [
        {"id": "m1", "lat": 40.7128, "lng": -74.0060, "imageUrl": "https://x/1.jpg",
         "title": "Pizza", "visitDate": "2024-03-02"},
        {"memory_id": 2, "latitude": "40.7130", "longitude": "-74.0062",
         "image_url": None, "visit_date": "2024-04-10", "mood": "happy"},
        {"id": "m3", "lat": 51.5074, "lon": -0.1278, "title": "London"},
    ]


@pytest.fixture
def jsonl_file(tmp_path, sample_records):
    """Temporary JSONL file holding sample_records."""
    path = tmp_path / "memories.jsonl"
    with open(path, "w", encoding="utf-8") as f:
        for rec in sample_records:
            f.write(json.dumps(rec) + "\n")
    return path


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def renderer(surface):
    """OverlayRenderer drawing onto a RecordingSurface, recording clicks."""
    clicks = []
    r = OverlayRenderer(
        surface,
        RecordingOverlay,
        on_marker_click=lambda rep, members: clicks.append((rep, members)),
    )
    r.clicks = clicks
    return r


def grid_projector(lat, lng):
    """Toy projection: 100000 px per degree, y grows southwards."""
    return (lng + 74.0) * 100000.0 + 500.0, (40.0 - lat) * 100000.0 + 500.0


@pytest.fixture
def toy_project():
    return grid_projector
