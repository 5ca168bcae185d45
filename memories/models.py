"""GeoPoint record for geotagged memories.

A GeoPoint is one memory a user dropped on the map: a coordinate plus the
optional photo, text and date metadata shown in marker and gallery views.
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Optional, Dict, Any


@dataclass(frozen=True)
class GeoPoint:
    """Single geotagged memory.

    Attributes:
        lat: Latitude in decimal degrees, [-90, 90].
        lng: Longitude in decimal degrees, [-180, 180].
        id: Backend identifier (optional, unsaved memories have none).
        image_url: Photo URL or storage handle (optional).
        title: Short title (optional).
        description: Free text (optional).
        visit_date: ISO-8601 date or datetime string (optional).
        mood: Mood tag (optional).
    """

    lat: float
    lng: float
    id: Optional[str] = None
    image_url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    visit_date: Optional[str] = None
    mood: Optional[str] = None

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)

    def visit_datetime(self) -> Optional[datetime]:
        """Parse visit_date.

        Returns:
            Naive datetime, or None if visit_date is missing or unparseable.
        """
        if not self.visit_date:
            return None
        text = self.visit_date.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        # Aware values are compared in UTC alongside naive ones
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.replace(tzinfo=None)

    def to_dict(self) -> Dict[str, Any]:
        """Return app-style record (camelCase keys, None values dropped)."""
        raw = asdict(self)
        out = {
            "id": raw["id"],
            "lat": raw["lat"],
            "lng": raw["lng"],
            "imageUrl": raw["image_url"],
            "title": raw["title"],
            "description": raw["description"],
            "visitDate": raw["visit_date"],
            "mood": raw["mood"],
        }
        return {k: v for k, v in out.items() if v is not None}
