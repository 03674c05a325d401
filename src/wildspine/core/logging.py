"""Logging configuration.

Builds a ``logging.config.dictConfig`` from settings: ``console`` output goes
through rich, ``json`` emits one JSON object per line.

Example:
    >>> from wildspine.core.config import get_settings
    >>> from wildspine.core.logging import build_logging_config
    >>> config = build_logging_config(get_settings(log_level="debug", log_format="json"))
    >>> config["root"]["level"]
    'DEBUG'
    >>> config["root"]["handlers"]
    ['json']
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import UTC, datetime
from typing import Any

from wildspine.core.config import Settings, get_settings


class JSONFormatter(logging.Formatter):
    """Render a log record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def build_logging_config(settings: Settings) -> dict[str, Any]:
    """Return a dictConfig mapping for the configured format and level."""
    level = settings.log_level.upper()
    handler = settings.log_format
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JSONFormatter},
            "plain": {"format": "%(name)s: %(message)s"},
        },
        "handlers": {
            "console": {
                "class": "rich.logging.RichHandler",
                "formatter": "plain",
                "level": level,
                "rich_tracebacks": True,
            },
            "json": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "level": level,
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            # SQL echo is controlled per engine, keep the library quiet otherwise
            "sqlalchemy": {"level": "WARNING"},
        },
        "root": {"level": level, "handlers": [handler]},
    }


def configure_logging(settings: Settings | None = None) -> None:
    """Configure the Python logging system from settings."""
    logging.config.dictConfig(build_logging_config(settings or get_settings()))
