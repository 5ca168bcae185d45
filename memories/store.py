"""In-memory GeoPoint store.

Ordered, append-only from the map's perspective: store order doubles as
creation order, which the "last" representative rule relies on. Every point
is validated on the way in.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Tuple, Dict, Any

from memories.models import GeoPoint
from memories.validation import validate_point, InvalidGeoPointError
from memories.io import records_to_points, load_points

logger = logging.getLogger(__name__)


class GeoPointStore:
    """Ordered sequence of validated memories.

    Args:
        points: Initial points (validated, order kept).
    """

    def __init__(self, points: Optional[Iterable[GeoPoint]] = None):
        self._points: List[GeoPoint] = []
        if points is not None:
            self.extend(points)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Dict[str, Any]],
        skip_invalid: bool = False,
    ) -> "GeoPointStore":
        """Build a store from raw app or backend records."""
        return cls(records_to_points(records, skip_invalid=skip_invalid))

    @classmethod
    def from_file(cls, path: str, skip_invalid: bool = True) -> "GeoPointStore":
        """Build a store from a JSONL/JSON/CSV file."""
        return cls(load_points(path, skip_invalid=skip_invalid))

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[GeoPoint]:
        return iter(self._points)

    def __getitem__(self, index: int) -> GeoPoint:
        return self._points[index]

    @property
    def points(self) -> Tuple[GeoPoint, ...]:
        """Snapshot of the stored points in store order."""
        return tuple(self._points)

    def append(self, point: GeoPoint) -> GeoPoint:
        """Validate and append a point.

        Raises:
            InvalidGeoPointError: If the coordinate is invalid.
        """
        self._points.append(validate_point(point))
        return point

    def extend(self, points: Iterable[GeoPoint]) -> None:
        """Validate and append several points; nothing is added on failure."""
        batch = [validate_point(p) for p in points]
        self._points.extend(batch)

    def replace_all(self, points: Iterable[GeoPoint]) -> None:
        """Swap in a freshly loaded point set (e.g. after a backend fetch)."""
        batch = [validate_point(p) for p in points]
        self._points = batch

    def update(self, point_id: str, **changes) -> GeoPoint:
        """Replace the point with the given id by an edited copy.

        Raises:
            KeyError: If no point has that id.
            InvalidGeoPointError: If the edit yields an invalid coordinate.
        """
        from dataclasses import replace

        for i, p in enumerate(self._points):
            if p.id == point_id:
                edited = validate_point(replace(p, **changes))
                self._points[i] = edited
                return edited
        raise KeyError(point_id)

    def remove(self, point_id: str) -> GeoPoint:
        """Remove the point with the given id.

        Raises:
            KeyError: If no point has that id.
        """
        for i, p in enumerate(self._points):
            if p.id == point_id:
                return self._points.pop(i)
        raise KeyError(point_id)

    def get(self, point_id: str) -> Optional[GeoPoint]:
        for p in self._points:
            if p.id == point_id:
                return p
        return None


__all__ = ["GeoPointStore", "InvalidGeoPointError"]
