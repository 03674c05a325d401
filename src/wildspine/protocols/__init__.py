"""Protocol definitions - all extension points."""

from wildspine.protocols.queue import Message, MessageQueue
from wildspine.protocols.repository import AnimalRepository, Repository, SightingRepository

__all__ = [
    # Repository
    "AnimalRepository",
    "Repository",
    "SightingRepository",
    # Queue
    "Message",
    "MessageQueue",
]
