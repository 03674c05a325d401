"""Core configuration, errors and orchestration."""

from wildspine.core.config import Settings, get_settings
from wildspine.core.runtime import Runtime, queue_from_settings
from wildspine.core.service import DEDUP_THRESHOLD_KM, SightingIngestionService

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    # Orchestration
    "DEDUP_THRESHOLD_KM",
    "Runtime",
    "SightingIngestionService",
    "queue_from_settings",
]
