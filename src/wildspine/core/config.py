"""WildSpine configuration.

Application settings loaded from environment variables with WILDSPINE_ prefix.

Example:
    >>> from wildspine.core.config import get_settings
    >>> settings = get_settings(log_level="DEBUG")
    >>> settings.log_level
    'DEBUG'
    >>> settings.dedup_threshold_km
    5.0
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Loads from environment variables with WILDSPINE_ prefix.

    Example:
        >>> from wildspine.core.config import Settings
        >>> s = Settings(database_url="sqlite:///sightings.db")
        >>> s.database_url
        'sqlite:///sightings.db'
        >>> s.queue_name
        'sightings'
        >>> s.redelivery_max_attempts is None
        True
    """

    model_config = SettingsConfigDict(
        env_prefix="WILDSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    storage_backend: Literal["memory", "sqlalchemy"] = Field(
        default="memory", description="Repository backend type"
    )
    database_url: str | None = Field(default=None, description="Database connection URL")

    # Queue
    queue_backend: Literal["memory", "sql"] = Field(default="memory", description="Queue backend type")
    queue_url: str | None = Field(
        default=None, description="Queue database URL (defaults to database_url)"
    )
    queue_name: str = Field(default="sightings", min_length=1, description="Durable queue name")
    queue_poll_interval: float = Field(default=0.5, gt=0.0, description="Seconds between polls")

    # Ingestion
    dedup_threshold_km: float = Field(default=5.0, ge=0.0)
    reject_zero_coordinates: bool = Field(
        default=True, description="Treat 0.0 lat/long as missing"
    )

    # Consumer redelivery (None = unbounded)
    redelivery_max_attempts: int | None = Field(default=None, ge=1)
    redelivery_base_delay: float = Field(default=0.0, ge=0.0)
    redelivery_max_delay: float = Field(default=60.0, ge=0.0)
    consumer_shutdown_timeout: float = Field(default=5.0, ge=0.0)

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(default="console", description="Log format")

    # API
    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=8080, ge=1, le=65535)
    default_page_size: int = Field(default=10, ge=1)


def get_settings(**overrides: Any) -> Settings:
    """Get settings with optional overrides.

    Example:
        >>> from wildspine.core.config import get_settings
        >>> s = get_settings(queue_backend="sql")
        >>> s.queue_backend
        'sql'
    """
    return Settings(**overrides)
