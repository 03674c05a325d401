"""Great-circle distance helpers.

Example:
    >>> from wildspine.models.base import Coordinates
    >>> from wildspine.utils.geo import distance_km
    >>> d = distance_km(Coordinates(lat=40.7128, long=-74.0060),
    ...                 Coordinates(lat=34.0522, long=-118.2437))
    >>> abs(d - 3935.75) < 0.1
    True
"""

from __future__ import annotations

from math import asin, cos, radians, sin, sqrt

from wildspine.models.base import Coordinates

EARTH_RADIUS_KM = 6371.0


def distance_km(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance in kilometres on a spherical Earth.

    Symmetric, zero for identical points.

    Example:
        >>> from wildspine.models.base import Coordinates
        >>> from wildspine.utils.geo import distance_km
        >>> p = Coordinates(lat=12.34, long=56.78)
        >>> distance_km(p, p)
        0.0
    """
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlat = lat2 - lat1
    dlon = radians(b.long) - radians(a.long)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # float error can push h a hair past 1 for antipodal points
    return 2 * EARTH_RADIUS_KM * asin(sqrt(min(1.0, h)))
