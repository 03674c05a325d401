"""Repository implementations.

All backends auto-create their schema on initialize().

Quick Start:
    from wildspine.storage import create_repository

    repo = create_repository("sqlite:///sightings.db")       # SQLite
    repo = create_repository("postgresql://localhost/wild")  # PostgreSQL
    repo = create_repository("memory://")                    # In-memory

    await repo.initialize()

Environment Variables:
    export WILDSPINE_STORAGE_BACKEND=sqlalchemy
    export WILDSPINE_DATABASE_URL=postgresql://localhost/wildspine
"""

from wildspine.storage.factory import create_repository, repository_from_settings
from wildspine.storage.memory import MemoryRepository
from wildspine.storage.sqlalchemy_storage import SQLAlchemyRepository, StorageConfig

__all__ = [
    "MemoryRepository",
    "SQLAlchemyRepository",
    "StorageConfig",
    "create_repository",
    "repository_from_settings",
]
