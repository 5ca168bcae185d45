"""Memory records for the map journal.

This module holds the GeoPoint record, its ingestion-boundary validation,
file loading, the in-memory store the map reads from, and configuration.

Modules:
    models: GeoPoint dataclass
    validation: Coordinate and schema checks (InvalidGeoPointError)
    io: Loading records from JSONL/JSON/CSV and backend rows
    store: Ordered in-memory GeoPointStore
    config: Default settings and JSON config loader
"""

from .models import GeoPoint

from .validation import (
    InvalidGeoPointError,
    is_valid_coordinate,
    validate_record,
    validate_point,
)

from .io import (
    normalize_record,
    records_to_points,
    load_records,
    load_points,
    save_points,
    points_to_frame,
)

from .store import GeoPointStore

from .config import load_config, default_config

__all__ = [
    'GeoPoint',
    'InvalidGeoPointError',
    'is_valid_coordinate',
    'validate_record',
    'validate_point',
    'normalize_record',
    'records_to_points',
    'load_records',
    'load_points',
    'save_points',
    'points_to_frame',
    'GeoPointStore',
    'load_config',
    'default_config',
]
