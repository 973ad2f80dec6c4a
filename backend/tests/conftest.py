"""Shared test fixtures for the file catalog test suite.

Provides an in-memory SQLite catalog, a temporary storage root and factory
helpers so tests run without Postgres.
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.models import Base
from app.models.file_record import FileRecord
from app.services.catalog import FileCatalog, FileSnapshot, to_snapshot
from app.services.file_service import FileService
from app.services.file_storage import FileStorageService


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_session():
    """Async session bound to a fresh in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def catalog(db_session):
    return FileCatalog(db_session)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@pytest.fixture
def storage_root(tmp_path) -> Path:
    root = tmp_path / "storage"
    root.mkdir()
    return root


@pytest.fixture
def storage(storage_root):
    return FileStorageService(str(storage_root))


@pytest.fixture
def service(catalog, storage):
    return FileService(catalog, storage)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_record(db_session, storage_root):
    """Insert a FileRecord directly, optionally writing its backing file.

    ``content=None`` leaves the file absent from disk.
    """

    async def _make(
        name: str = "report",
        file_type: str = ".txt",
        *,
        filename: str | None = None,
        content: bytes | None = b"hello",
        time_created: datetime | None = None,
    ):
        path = storage_root / (filename or f"{name}{file_type}")
        if content is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        created = time_created or datetime.now(timezone.utc)
        record = FileRecord(
            name=name,
            file_type=file_type,
            file_path=path.as_posix(),
            time_created=created,
            time_modified=created,
        )
        db_session.add(record)
        await db_session.commit()
        await db_session.refresh(record)
        return to_snapshot(record)

    return _make


@pytest.fixture
def make_snapshot():
    """Build a FileSnapshot without touching the database."""

    def _make(file_id: int, name: str, file_type: str = ".txt", file_path: str | None = None):
        now = datetime.now(timezone.utc)
        return FileSnapshot(
            id=file_id,
            name=name,
            file_type=file_type,
            file_path=file_path or f"/srv/files/{file_id}{file_type}",
            time_created=now,
            time_modified=now,
        )

    return _make
