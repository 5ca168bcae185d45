"""Loading memory records from files and backend rows.

Handles app-style records (``lat``/``lng``/``imageUrl``/``visitDate``) and
backend rows (``latitude``/``longitude``/``image_url``/``visit_date``) and
turns them into validated GeoPoints in their original order.
"""

import json
import logging
import os
from typing import Iterable, List, Dict, Any, Optional

import pandas as pd

from memories.models import GeoPoint
from memories.validation import validate_record, InvalidGeoPointError

logger = logging.getLogger(__name__)

FIELD_ALIASES: Dict[str, tuple] = {
    "id": ("id", "memory_id"),
    "lat": ("lat", "latitude"),
    "lng": ("lng", "lon", "longitude"),
    "image_url": ("image_url", "imageUrl"),
    "title": ("title",),
    "description": ("description",),
    "visit_date": ("visit_date", "visitDate"),
    "mood": ("mood",),
}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def normalize_record(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Map aliased keys onto GeoPoint field names.

    Args:
        raw: Record from a file, the backend, or the map UI.

    Returns:
        Dict with snake_case GeoPoint keys. Missing optional fields are None.
        Coordinates are coerced to float where possible; ids to str.

    Raises:
        InvalidGeoPointError: If raw is not a mapping.

    Example:
        >>> normalize_record({"latitude": 40.0, "longitude": -74.0, "image_url": "a.jpg"})["lng"]
        -74.0
    """
    if not isinstance(raw, dict):
        raise InvalidGeoPointError(f"Expected an object, got {type(raw).__name__}")
    out: Dict[str, Any] = {}
    for field, aliases in FIELD_ALIASES.items():
        value = None
        for alias in aliases:
            if alias in raw and not _is_missing(raw[alias]):
                value = raw[alias]
                break
        out[field] = value

    for field in ("lat", "lng"):
        value = out[field]
        if isinstance(value, str):
            try:
                out[field] = float(value)
            except ValueError:
                pass
        elif value is not None and not isinstance(value, bool):
            try:
                out[field] = float(value)
            except (TypeError, ValueError):
                pass

    # CSV ids come back as floats when the column has gaps
    if isinstance(out["id"], float) and out["id"].is_integer():
        out["id"] = int(out["id"])
    if out["id"] is not None:
        out["id"] = str(out["id"])
    for field in ("image_url", "title", "description", "visit_date", "mood"):
        if out[field] is not None and not isinstance(out[field], str):
            out[field] = str(out[field])
    return out


def records_to_points(
    records: Iterable[Dict[str, Any]],
    skip_invalid: bool = False,
) -> List[GeoPoint]:
    """Convert raw records to GeoPoints, preserving order.

    Args:
        records: Raw record dicts.
        skip_invalid: Drop (and log) invalid rows instead of raising.

    Returns:
        List of GeoPoints.

    Raises:
        InvalidGeoPointError: On the first invalid row when skip_invalid is False.
    """
    points: List[GeoPoint] = []
    for i, raw in enumerate(records):
        try:
            points.append(validate_record(normalize_record(raw)))
        except InvalidGeoPointError as e:
            if not skip_invalid:
                raise InvalidGeoPointError(f"Row {i}: {e}") from e
            logger.warning("Skipping memory row %d: %s", i, e)
    return points


def _read_json_records(path: str) -> List[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        content = f.read().strip()
    if not content:
        return []
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        pass  # not a single document, read as JSONL
    else:
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return [data]
        raise ValueError(f"Expected a JSON array or object in {path}")

    records = []
    for lineno, line in enumerate(content.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise ValueError(f"{path}:{lineno}: invalid JSON line ({e.msg})") from e
    return records


def load_records(path: str) -> List[Dict[str, Any]]:
    """Load raw memory records from JSONL, JSON or CSV.

    Args:
        path: Path to input file (.jsonl, .json, or .csv).

    Returns:
        List of record dicts in file order.

    Raises:
        FileNotFoundError: If input file doesn't exist.
        ValueError: If the file format is unsupported or malformed.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input file not found: {path}")

    ext = os.path.splitext(path)[1].lower()
    if ext in (".jsonl", ".json"):
        return _read_json_records(path)
    if ext == ".csv":
        df = pd.read_csv(path)
        return df.to_dict(orient="records")
    raise ValueError(f"Unsupported file format: {ext} (use .jsonl, .json, or .csv)")


def load_points(path: str, skip_invalid: bool = True) -> List[GeoPoint]:
    """Load and validate GeoPoints from a file.

    Args:
        path: Path to input file (.jsonl, .json, or .csv).
        skip_invalid: Drop invalid rows with a warning (default) or raise.

    Returns:
        List of GeoPoints in file order.
    """
    records = load_records(path)
    points = records_to_points(records, skip_invalid=skip_invalid)
    logger.debug("Loaded %d/%d memories from %s", len(points), len(records), path)
    return points


def points_to_frame(points: Iterable[GeoPoint]) -> pd.DataFrame:
    """Tabulate GeoPoints (one row per point, store order)."""
    rows = [
        {
            "id": p.id,
            "lat": p.lat,
            "lng": p.lng,
            "image_url": p.image_url,
            "title": p.title,
            "description": p.description,
            "visit_date": p.visit_date,
            "mood": p.mood,
        }
        for p in points
    ]
    columns = list(FIELD_ALIASES.keys())
    return pd.DataFrame(rows, columns=columns)


def save_points(points: Iterable[GeoPoint], path: str, fmt: Optional[str] = None) -> None:
    """Write GeoPoints as JSONL (app-style keys) or CSV."""
    ext = fmt or os.path.splitext(path)[1].lower().lstrip(".")
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    if ext == "csv":
        points_to_frame(points).to_csv(path, index=False)
        return
    with open(path, "w", encoding="utf-8") as f:
        for p in points:
            f.write(json.dumps(p.to_dict(), ensure_ascii=False) + "\n")
