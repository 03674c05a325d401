"""WildSpine utilities.

Distance computation, pagination and redelivery policy.
"""

from wildspine.utils.geo import EARTH_RADIUS_KM, distance_km
from wildspine.utils.pagination import (
    DEFAULT_PAGE_SIZE,
    Page,
    normalize_page,
    offset_for,
    total_pages,
)
from wildspine.utils.retry import RedeliveryPolicy

__all__ = [
    # Geo
    "EARTH_RADIUS_KM",
    "distance_km",
    # Pagination
    "DEFAULT_PAGE_SIZE",
    "Page",
    "normalize_page",
    "offset_for",
    "total_pages",
    # Redelivery
    "RedeliveryPolicy",
]
