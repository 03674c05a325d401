"""
WildSpine SQLAlchemy Models and Schema Management.

This module provides:
- SQLAlchemy ORM models for animals, sightings and queued messages
- Index definitions for the hot lookups (latest sighting per animal, queue head)
- Schema creation helper

Types are kept portable so the same schema runs on PostgreSQL and SQLite.

Usage:
    from wildspine.storage.models import create_all_tables

    engine = create_engine("postgresql://...")
    create_all_tables(engine)
"""

from datetime import date, datetime

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    LargeBinary,
    String,
    func,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# =============================================================================
# Base Model
# =============================================================================


class Base(DeclarativeBase):
    """Base class for all WildSpine models."""


# =============================================================================
# Animal Model
# =============================================================================


class AnimalModel(Base):
    """Tracked animals. Ordered by last_seen for listing."""

    __tablename__ = "animals"
    __table_args__ = (Index("ix_animals_last_seen", "last_seen"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    last_seen: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    long: Mapped[float] = mapped_column(Float, nullable=False)


# =============================================================================
# Sighting Model
# =============================================================================


class SightingModel(Base):
    """
    Sighting reports.

    Indexes optimized for:
    - Most recent sighting per animal (dedup check)
    - Newest-first history and pagination per animal
    """

    __tablename__ = "sightings"
    __table_args__ = (Index("ix_sightings_animal_timestamp", "animal_id", "timestamp"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # animal_id is intentionally not a foreign key; the core does not validate it
    animal_id: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    long: Mapped[float] = mapped_column(Float, nullable=False)
    image: Mapped[bytes | None] = mapped_column(LargeBinary)
    reporter_email: Mapped[str] = mapped_column(String(320), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


# =============================================================================
# Queue Message Model - durable work queue
# =============================================================================


class QueueMessageModel(Base):
    """
    Durable queue storage.

    ``id`` doubles as the delivery order: the lowest ready id is the queue
    head, and a requeue re-inserts the message with a fresh id at the tail.
    """

    __tablename__ = "queue_messages"
    __table_args__ = (Index("ix_queue_messages_head", "queue_name", "state", "id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    message_id: Mapped[str] = mapped_column(String(64), nullable=False)
    queue_name: Mapped[str] = mapped_column(String(128), nullable=False)
    body: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    state: Mapped[str] = mapped_column(String(16), nullable=False, default="ready")
    attempt: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


def create_all_tables(engine: Engine) -> None:
    """Create all tables (IF NOT EXISTS)."""
    Base.metadata.create_all(engine)
