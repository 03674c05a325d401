"""Base models and shared types.

Example:
    >>> from wildspine.models.base import Coordinates
    >>> c = Coordinates(lat=12.34, long=56.78)
    >>> c.lat
    12.34
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class WildSpineModel(BaseModel):
    """Base model with standard configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="forbid",
    )


class Coordinates(BaseModel):
    """A latitude/longitude pair in signed decimal degrees.

    Only used for distance computation; has no lifecycle of its own.

    Example:
        >>> from wildspine.models.base import Coordinates
        >>> Coordinates(lat=-33.86, long=151.21).long
        151.21
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    lat: float = Field(..., ge=-90.0, le=90.0)
    long: float = Field(..., ge=-180.0, le=180.0)
