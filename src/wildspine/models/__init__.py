"""Domain models."""

from wildspine.models.animal import TrackedAnimal
from wildspine.models.base import Coordinates, WildSpineModel
from wildspine.models.notification import NotificationMessage
from wildspine.models.sighting import Sighting

__all__ = [
    "Coordinates",
    "NotificationMessage",
    "Sighting",
    "TrackedAnimal",
    "WildSpineModel",
]
