"""Tracked animal model.

Animals are created through an administrative operation and are immutable
afterwards.

Example:
    >>> from datetime import UTC, date, datetime
    >>> from wildspine.models.animal import TrackedAnimal
    >>> a = TrackedAnimal(
    ...     name="Shere Khan",
    ...     date_of_birth=date(2019, 3, 1),
    ...     last_seen=datetime(2024, 5, 1, tzinfo=UTC),
    ...     lat=21.5,
    ...     long=79.1,
    ... )
    >>> a.name
    'Shere Khan'
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import ConfigDict, Field

from wildspine.models.base import Coordinates, WildSpineModel


class TrackedAnimal(WildSpineModel):
    """An animal whose sightings are tracked."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="forbid",
        frozen=True,
    )

    id: int | None = Field(default=None, description="Assigned by persistence")
    name: str = Field(..., min_length=1)
    date_of_birth: date
    last_seen: datetime
    lat: float = Field(..., ge=-90.0, le=90.0)
    long: float = Field(..., ge=-180.0, le=180.0)

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, long=self.long)
