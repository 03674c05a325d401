"""Tests for SQLAlchemyRepository against SQLite."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

pytest.importorskip("sqlalchemy")

from wildspine.core.config import get_settings
from wildspine.core.exceptions import ConfigurationError, StorageError
from wildspine.models import Sighting, TrackedAnimal
from wildspine.protocols.repository import Repository
from wildspine.storage import create_repository, repository_from_settings
from wildspine.storage.memory import MemoryRepository
from wildspine.storage.sqlalchemy_storage import SQLAlchemyRepository

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def sighting(animal_id=1, minutes=0, lat=12.34, long=56.78, image=None):
    return Sighting(
        animal_id=animal_id,
        timestamp=T0 + timedelta(minutes=minutes),
        lat=lat,
        long=long,
        image=image,
        reporter_email="ranger@example.org",
    )


@pytest.fixture
async def repo():
    r = SQLAlchemyRepository("sqlite://")
    await r.initialize()
    yield r
    await r.close()


# =============================================================================
# Sighting Tests
# =============================================================================


class TestSQLAlchemySightings:
    """Tests for sighting persistence."""

    async def test_create_and_read_back(self, repo):
        """Stored fields round-trip, including image bytes."""
        sighting_id = await repo.create_sighting(sighting(image=b"\x89PNG"))

        latest = await repo.most_recent_sighting(1)

        assert latest is not None
        assert latest.id == sighting_id
        assert latest.image == b"\x89PNG"
        assert latest.timestamp == T0
        assert latest.timestamp.tzinfo is not None

    async def test_most_recent_is_by_timestamp(self, repo):
        """Insert order does not decide the latest sighting."""
        await repo.create_sighting(sighting(minutes=60, lat=1.0))
        await repo.create_sighting(sighting(minutes=0, lat=2.0))

        latest = await repo.most_recent_sighting(1)

        assert latest is not None
        assert latest.lat == 1.0

    async def test_offset_timestamps_stored_as_utc(self, repo):
        """Non-UTC offsets are normalized before storage."""
        ist = timezone(timedelta(hours=5, minutes=30))
        local = Sighting(
            animal_id=1,
            timestamp=datetime(2024, 5, 1, 17, 45, tzinfo=ist),
            lat=1.0,
            long=1.0,
            reporter_email="a@b.org",
        )
        await repo.create_sighting(sighting(minutes=30, lat=2.0))
        await repo.create_sighting(local)

        latest = await repo.most_recent_sighting(1)

        assert latest is not None
        assert latest.lat == 2.0
        history = await repo.all_sightings(1)
        assert history[1].timestamp == datetime(2024, 5, 1, 12, 15, tzinfo=UTC)

    async def test_no_history(self, repo):
        """Unknown animals have no latest sighting."""
        assert await repo.most_recent_sighting(1) is None
        assert await repo.all_sightings(1) == []

    async def test_sightings_page(self, repo):
        """Paging is newest-first with a total count."""
        for minutes in range(12):
            await repo.create_sighting(sighting(minutes=minutes))
        await repo.create_sighting(sighting(animal_id=2))

        items, total = await repo.sightings_page(1, offset=10, limit=10)

        assert total == 12
        assert [s.timestamp for s in items] == [T0 + timedelta(minutes=1), T0]

    async def test_uninitialized_repository_raises_storage_error(self):
        """Missing tables surface as StorageError."""
        repo = SQLAlchemyRepository("sqlite://")
        try:
            with pytest.raises(StorageError):
                await repo.most_recent_sighting(1)
        finally:
            await repo.close()


# =============================================================================
# Animal Tests
# =============================================================================


class TestSQLAlchemyAnimals:
    """Tests for animal persistence."""

    async def test_create_get_and_page(self, repo):
        """Animals are listed by last_seen descending."""
        for name, days in (("a", 0), ("b", 3), ("c", 1)):
            await repo.create_animal(
                TrackedAnimal(
                    name=name,
                    date_of_birth=date(2020, 1, 1),
                    last_seen=T0 + timedelta(days=days),
                    lat=10.0,
                    long=20.0,
                )
            )

        items, total = await repo.animals_page(offset=0, limit=10)
        fetched = await repo.get_animal(items[0].id)

        assert total == 3
        assert [a.name for a in items] == ["b", "c", "a"]
        assert fetched is not None
        assert fetched.date_of_birth == date(2020, 1, 1)

    async def test_get_missing(self, repo):
        assert await repo.get_animal(1) is None


# =============================================================================
# Factory Tests
# =============================================================================


class TestFactory:
    """Tests for repository construction."""

    def test_memory_url(self):
        assert isinstance(create_repository("memory://"), MemoryRepository)
        assert isinstance(create_repository(), MemoryRepository)

    def test_sql_url(self):
        repo = create_repository("sqlite://", pool_size=2)
        assert isinstance(repo, SQLAlchemyRepository)
        assert isinstance(repo, Repository)

    def test_from_settings_requires_url(self):
        settings = get_settings(storage_backend="sqlalchemy", database_url=None)
        with pytest.raises(ConfigurationError):
            repository_from_settings(settings)

    def test_from_settings_memory(self):
        assert isinstance(repository_from_settings(get_settings()), MemoryRepository)
