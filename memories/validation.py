"""Ingestion-boundary validation for memory records.

Coordinates are checked here, before points reach the clustering engine,
because NaN distances silently corrupt cluster membership.
"""

import math
from typing import Dict, Any

from jsonschema import Draft7Validator

from memories.models import GeoPoint


class InvalidGeoPointError(ValueError):
    """Raised when a record cannot become a valid GeoPoint."""


GEOPOINT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["lat", "lng"],
    "properties": {
        "id": {"type": ["string", "null"]},
        "lat": {"type": "number", "minimum": -90, "maximum": 90},
        "lng": {"type": "number", "minimum": -180, "maximum": 180},
        "image_url": {"type": ["string", "null"]},
        "title": {"type": ["string", "null"]},
        "description": {"type": ["string", "null"]},
        "visit_date": {"type": ["string", "null"]},
        "mood": {"type": ["string", "null"]},
    },
}

_validator = Draft7Validator(GEOPOINT_SCHEMA)


def is_valid_coordinate(lat: Any, lng: Any) -> bool:
    """Check that lat/lng are finite numbers inside WGS84 bounds.

    Example:
        >>> is_valid_coordinate(40.7128, -74.0060)
        True
        >>> is_valid_coordinate(float("nan"), 0.0)
        False
    """
    if isinstance(lat, bool) or isinstance(lng, bool):
        return False
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        return False
    return -90.0 <= lat_f <= 90.0 and -180.0 <= lng_f <= 180.0


def validate_record(record: Dict[str, Any]) -> GeoPoint:
    """Validate a normalized record and build a GeoPoint.

    Args:
        record: Dict with snake_case GeoPoint keys (see GEOPOINT_SCHEMA).

    Returns:
        GeoPoint built from the record.

    Raises:
        InvalidGeoPointError: If the record violates the schema or carries
            non-finite coordinates.
    """
    # NaN passes jsonschema's minimum/maximum checks, so test it first
    if not is_valid_coordinate(record.get("lat"), record.get("lng")):
        raise InvalidGeoPointError(
            f"Invalid coordinate: lat={record.get('lat')!r}, lng={record.get('lng')!r}"
        )

    errors = sorted(_validator.iter_errors(record), key=lambda e: list(e.path))
    if errors:
        first = errors[0]
        where = ".".join(str(p) for p in first.path) or "<record>"
        raise InvalidGeoPointError(f"Invalid memory record at {where}: {first.message}")

    return GeoPoint(
        lat=float(record["lat"]),
        lng=float(record["lng"]),
        id=record.get("id"),
        image_url=record.get("image_url"),
        title=record.get("title"),
        description=record.get("description"),
        visit_date=record.get("visit_date"),
        mood=record.get("mood"),
    )


def validate_point(point: GeoPoint) -> GeoPoint:
    """Re-check a GeoPoint built elsewhere.

    Raises:
        InvalidGeoPointError: If the coordinate is non-finite or out of range.
    """
    if not is_valid_coordinate(point.lat, point.lng):
        raise InvalidGeoPointError(
            f"Invalid coordinate: lat={point.lat!r}, lng={point.lng!r}"
        )
    return point
