"""File catalog repository.

Explicit commands over the ``files`` table. Callers receive immutable
``FileSnapshot`` values; ORM instances never leave this module, and every
mutation takes a changeset and returns the new snapshot.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import ColumnElement, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError, NotFoundError
from app.models.base import utc_now
from app.models.file_record import FileRecord

UPDATABLE_FIELDS = {"name", "file_type", "file_path"}


@dataclass(frozen=True)
class FileSnapshot:
    id: int
    name: str
    file_type: str
    file_path: str
    time_created: datetime
    time_modified: datetime


def _as_utc(value: datetime) -> datetime:
    # Some backends (sqlite) hand back naive datetimes; values are always stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_snapshot(record: FileRecord) -> FileSnapshot:
    return FileSnapshot(
        id=record.id,
        name=record.name,
        file_type=record.file_type,
        file_path=record.file_path,
        time_created=_as_utc(record.time_created),
        time_modified=_as_utc(record.time_modified),
    )


class FileCatalog:
    """Persists FileRecords; owns ids and timestamps."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, name: str, file_type: str, file_path: str) -> FileSnapshot:
        now = utc_now()
        record = FileRecord(
            name=name,
            file_type=file_type,
            file_path=file_path,
            time_created=now,
            time_modified=now,
        )
        self.db.add(record)
        await self._commit(file_path)
        await self.db.refresh(record)
        return to_snapshot(record)

    async def find_by_id(self, file_id: int) -> Optional[FileSnapshot]:
        record = await self.db.get(FileRecord, file_id)
        return to_snapshot(record) if record else None

    async def find_by_ids(self, file_ids: list[int]) -> list[FileSnapshot]:
        """Fetch records for ``file_ids`` in requested order, duplicates collapsed."""
        if not file_ids:
            return []
        result = await self.db.execute(select(FileRecord).where(FileRecord.id.in_(set(file_ids))))
        by_id = {r.id: to_snapshot(r) for r in result.scalars().all()}
        ordered = dict.fromkeys(file_ids)
        return [by_id[i] for i in ordered if i in by_id]

    async def find_by_path(self, file_path: str) -> Optional[FileSnapshot]:
        result = await self.db.execute(
            select(FileRecord).where(FileRecord.file_path == file_path)
        )
        record = result.scalars().first()
        return to_snapshot(record) if record else None

    async def filter(self, predicate: ColumnElement[bool]) -> list[FileSnapshot]:
        result = await self.db.execute(
            select(FileRecord).where(predicate).order_by(FileRecord.id)
        )
        return [to_snapshot(r) for r in result.scalars().all()]

    async def update(self, file_id: int, changes: dict) -> FileSnapshot:
        """Apply ``changes`` and bump time_modified. Unknown keys raise ValueError."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        record = await self.db.get(FileRecord, file_id)
        if record is None:
            raise NotFoundError(file_id)

        for key, value in changes.items():
            setattr(record, key, value)
        record.time_modified = utc_now()

        await self._commit(record.file_path)
        await self.db.refresh(record)
        return to_snapshot(record)

    async def delete(self, file_id: int) -> bool:
        record = await self.db.get(FileRecord, file_id)
        if record is None:
            return False
        await self.db.delete(record)
        await self.db.commit()
        return True

    async def _commit(self, file_path: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(f"File path '{file_path}' is already registered.") from e
