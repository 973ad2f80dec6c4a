"""Tests for the FileCatalog repository."""
from __future__ import annotations

import dataclasses
from datetime import datetime, timezone

import pytest

from app.errors import ConflictError, NotFoundError
from app.services.catalog import FileSnapshot


class TestCreate:
    async def test_assigns_id_and_timestamps(self, catalog):
        before = datetime.now(timezone.utc)
        record = await catalog.create(name="a", file_type=".txt", file_path="/srv/files/a.txt")

        assert isinstance(record, FileSnapshot)
        assert record.id is not None
        assert before <= record.time_created <= datetime.now(timezone.utc)
        assert record.time_modified == record.time_created

    async def test_ids_are_unique(self, catalog):
        first = await catalog.create(name="a", file_type=".txt", file_path="/srv/files/a.txt")
        second = await catalog.create(name="a", file_type=".txt", file_path="/srv/files/b.txt")
        assert first.id != second.id

    async def test_duplicate_path_conflicts(self, catalog):
        await catalog.create(name="a", file_type=".txt", file_path="/srv/files/a.txt")
        with pytest.raises(ConflictError):
            await catalog.create(name="b", file_type=".txt", file_path="/srv/files/a.txt")

    async def test_snapshots_are_immutable(self, catalog):
        record = await catalog.create(name="a", file_type=".txt", file_path="/srv/files/a.txt")
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.name = "b"


class TestFind:
    async def test_find_by_id(self, catalog, make_record):
        created = await make_record("a")
        assert await catalog.find_by_id(created.id) == created
        assert await catalog.find_by_id(9999) is None

    async def test_find_by_ids_keeps_requested_order(self, catalog, make_record):
        a = await make_record("a")
        b = await make_record("b")
        c = await make_record("c")

        records = await catalog.find_by_ids([c.id, 9999, a.id, c.id, b.id])
        assert [r.id for r in records] == [c.id, a.id, b.id]

    async def test_find_by_ids_empty(self, catalog):
        assert await catalog.find_by_ids([]) == []

    async def test_find_by_path(self, catalog, make_record):
        created = await make_record("a")
        assert await catalog.find_by_path(created.file_path) == created
        assert await catalog.find_by_path("/nowhere") is None


class TestUpdate:
    async def test_applies_changes_and_bumps_time_modified(self, catalog, make_record):
        created = await make_record("a", time_created=datetime(2024, 1, 1, tzinfo=timezone.utc))

        updated = await catalog.update(created.id, {"name": "renamed"})

        assert updated.name == "renamed"
        assert updated.time_created == created.time_created
        assert updated.time_modified > created.time_modified

    async def test_unknown_id(self, catalog):
        with pytest.raises(NotFoundError):
            await catalog.update(42, {"name": "x"})

    async def test_rejects_unknown_fields(self, catalog, make_record):
        created = await make_record("a")
        with pytest.raises(ValueError):
            await catalog.update(created.id, {"id": 7})


class TestDelete:
    async def test_delete(self, catalog, make_record):
        created = await make_record("a")
        assert await catalog.delete(created.id) is True
        assert await catalog.find_by_id(created.id) is None
        assert await catalog.delete(created.id) is False
