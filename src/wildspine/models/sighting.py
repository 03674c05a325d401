"""Sighting model - a timestamped, geolocated report for a tracked animal.

Sightings are created once and never mutated:
- ``id`` is assigned by the repository on insert
- ``image`` holds raw bytes and is left out of JSON dumps

Example:
    >>> from datetime import UTC, datetime
    >>> from wildspine.models.sighting import Sighting
    >>> s = Sighting(
    ...     animal_id=1,
    ...     timestamp=datetime(2024, 5, 1, tzinfo=UTC),
    ...     lat=12.34,
    ...     long=56.78,
    ...     reporter_email="ranger@example.org",
    ... )
    >>> s.id is None
    True
    >>> s.coordinates.lat
    12.34
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from wildspine.models.base import Coordinates, WildSpineModel


class Sighting(WildSpineModel):
    """One observation report.

    Example:
        >>> from datetime import UTC, datetime
        >>> from wildspine.models.sighting import Sighting
        >>> s = Sighting(
        ...     id=3,
        ...     animal_id=1,
        ...     timestamp=datetime(2024, 5, 1, tzinfo=UTC),
        ...     lat=1.0,
        ...     long=2.0,
        ...     reporter_email="a@b.org",
        ...     image=b"jpeg",
        ... )
        >>> "image" in s.model_dump(mode="json")
        False
    """

    id: int | None = Field(default=None, description="Assigned by persistence")
    animal_id: int = Field(..., description="Tracked animal reference (not validated)")
    timestamp: datetime = Field(..., description="When the animal was seen")
    lat: float = Field(..., ge=-90.0, le=90.0)
    long: float = Field(..., ge=-180.0, le=180.0)
    image: bytes | None = Field(default=None, exclude=True, repr=False)
    reporter_email: str = Field(..., min_length=1, description="Reporter identity")

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, long=self.long)
