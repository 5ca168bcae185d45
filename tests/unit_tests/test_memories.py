"""Unit tests for the memories package.

Tests the GeoPoint record, ingestion-boundary validation and the ordered
in-memory store.
"""

import math
from datetime import datetime

import pytest

from memories import (
    GeoPoint,
    GeoPointStore,
    InvalidGeoPointError,
    is_valid_coordinate,
    validate_record,
    validate_point,
)


class TestGeoPoint:
    """Test suite for the GeoPoint record."""

    def test_has_image(self):
        """Test has_image is true only for a non-empty image_url."""
        assert GeoPoint(1.0, 2.0, image_url="a.jpg").has_image
        assert not GeoPoint(1.0, 2.0).has_image
        assert not GeoPoint(1.0, 2.0, image_url="").has_image

    def test_visit_datetime_parses_date_and_utc_suffix(self):
        """Test ISO dates and 'Z' timestamps parse to naive datetimes."""
        assert GeoPoint(0, 0, visit_date="2024-05-01").visit_datetime() == datetime(2024, 5, 1)
        parsed = GeoPoint(0, 0, visit_date="2024-07-15T10:00:00Z").visit_datetime()
        assert parsed == datetime(2024, 7, 15, 10, 0, 0)
        assert parsed.tzinfo is None

    def test_visit_datetime_missing_or_garbage(self):
        """Test missing or unparseable dates give None."""
        assert GeoPoint(0, 0).visit_datetime() is None
        assert GeoPoint(0, 0, visit_date="last summer").visit_datetime() is None

    def test_to_dict_uses_app_keys(self):
        """Test to_dict emits camelCase keys and drops None values."""
        d = GeoPoint(40.0, -74.0, id="m1", image_url="a.jpg", visit_date="2024-01-01").to_dict()
        assert d == {"id": "m1", "lat": 40.0, "lng": -74.0, "imageUrl": "a.jpg", "visitDate": "2024-01-01"}

    def test_frozen(self):
        """Test GeoPoints are immutable."""
        p = GeoPoint(1.0, 2.0)
        with pytest.raises(AttributeError):
            p.lat = 3.0


class TestValidation:
    """Test suite for coordinate and record validation."""

    @pytest.mark.parametrize("lat,lng", [
        (0.0, 0.0),
        (90.0, 180.0),
        (-90.0, -180.0),
        ("40.5", "-74.1"),
    ])
    def test_valid_coordinates(self, lat, lng):
        assert is_valid_coordinate(lat, lng)

    @pytest.mark.parametrize("lat,lng", [
        (float("nan"), 0.0),
        (0.0, float("inf")),
        (90.0001, 0.0),
        (0.0, -180.5),
        (None, 0.0),
        ("north", 0.0),
        (True, 0.0),
    ])
    def test_invalid_coordinates(self, lat, lng):
        assert not is_valid_coordinate(lat, lng)

    def test_validate_record_builds_point(self):
        """Test a valid normalized record becomes a GeoPoint."""
        p = validate_record({"lat": 40.0, "lng": -74.0, "id": "x", "title": "Hi"})
        assert p == GeoPoint(40.0, -74.0, id="x", title="Hi")

    def test_validate_record_rejects_nan(self):
        """Test NaN coordinates are rejected before the schema check."""
        with pytest.raises(InvalidGeoPointError, match="Invalid coordinate"):
            validate_record({"lat": math.nan, "lng": 0.0})

    def test_validate_record_schema_error(self):
        """Test a wrongly typed optional field fails the schema."""
        with pytest.raises(InvalidGeoPointError, match="title"):
            validate_record({"lat": 1.0, "lng": 1.0, "title": 42})

    def test_invalid_geopoint_error_is_value_error(self):
        assert issubclass(InvalidGeoPointError, ValueError)

    def test_validate_point(self):
        p = GeoPoint(10.0, 20.0)
        assert validate_point(p) is p
        with pytest.raises(InvalidGeoPointError):
            validate_point(GeoPoint(float("nan"), 20.0))


class TestGeoPointStore:
    """Test suite for the ordered GeoPointStore."""

    def test_order_preserved(self, close_pair):
        """Test store order equals insertion order."""
        store = GeoPointStore(close_pair)
        assert [p.id for p in store] == ["p1", "p2", "p3"]
        assert len(store) == 3
        assert store[1].id == "p2"
        assert store.points == tuple(close_pair)

    def test_append_validates(self):
        """Test append rejects invalid coordinates and leaves the store unchanged."""
        store = GeoPointStore()
        store.append(GeoPoint(1.0, 1.0, id="ok"))
        with pytest.raises(InvalidGeoPointError):
            store.append(GeoPoint(float("nan"), 1.0))
        assert len(store) == 1

    def test_extend_is_atomic(self):
        """Test a single bad point in a batch adds nothing."""
        store = GeoPointStore()
        with pytest.raises(InvalidGeoPointError):
            store.extend([GeoPoint(1.0, 1.0), GeoPoint(91.0, 1.0)])
        assert len(store) == 0

    def test_from_records(self, sample_records):
        """Test building from mixed app/backend records."""
        store = GeoPointStore.from_records(sample_records)
        assert [p.id for p in store] == ["m1", "2", "m3"]
        assert store[0].image_url == "https://x/1.jpg"
        assert store[1].lat == pytest.approx(40.7130)

    def test_update_and_remove(self, close_pair):
        """Test editing and deleting by id."""
        store = GeoPointStore(close_pair)
        edited = store.update("p2", title="Coffee")
        assert edited.title == "Coffee"
        assert store.get("p2").title == "Coffee"
        assert [p.id for p in store] == ["p1", "p2", "p3"]

        removed = store.remove("p1")
        assert removed.id == "p1"
        assert store.get("p1") is None
        assert [p.id for p in store] == ["p2", "p3"]

    def test_update_missing_raises(self):
        store = GeoPointStore()
        with pytest.raises(KeyError):
            store.update("nope", title="x")
        with pytest.raises(KeyError):
            store.remove("nope")

    def test_update_rejects_invalid_edit(self, close_pair):
        store = GeoPointStore(close_pair)
        with pytest.raises(InvalidGeoPointError):
            store.update("p1", lat=200.0)
        assert store.get("p1").lat == 40.0

    def test_replace_all(self, close_pair):
        store = GeoPointStore(close_pair)
        store.replace_all([GeoPoint(0.0, 0.0, id="z")])
        assert [p.id for p in store] == ["z"]
