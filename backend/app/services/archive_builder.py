"""Build download payloads: a single file, or an in-memory zip of several.

The zip is assembled completely before it is returned, which keeps error
handling simple (no half-written responses) at the cost of holding the whole
archive in memory. Fine for moderate batches; very large batches would need a
streaming zip writer instead.
"""
import io
import logging
import os
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone

from app.errors import ArchiveFailureError
from app.services.catalog import FileSnapshot
from app.services.content_types import resolve_content_type
from app.services.file_storage import FileStorageService

logger = logging.getLogger(__name__)

ZIP_MEDIA_TYPE = "application/zip"


@dataclass(frozen=True)
class FileDownload:
    path: str
    filename: str
    media_type: str


@dataclass(frozen=True)
class ArchiveDownload:
    content: bytes
    filename: str
    media_type: str = ZIP_MEDIA_TYPE


def download_filename(record: FileSnapshot) -> str:
    return os.path.basename(record.file_path) or f"{record.name}{record.file_type}"


def single_file_download(record: FileSnapshot) -> FileDownload:
    return FileDownload(
        path=record.file_path,
        filename=download_filename(record),
        media_type=resolve_content_type(record.file_type),
    )


def assign_entry_names(records: list[FileSnapshot]) -> list[tuple[FileSnapshot, str]]:
    """Pair each record with a unique zip entry name, in input order.

    The first record to claim ``{name}{file_type}`` keeps it; later ones are
    prefixed with their catalog id. If even that is taken (a record literally
    named ``3_report``), a counter is added until the name is free.
    """
    used: set[str] = set()
    named = []
    for record in records:
        entry_name = f"{record.name}{record.file_type}"
        if entry_name in used:
            entry_name = f"{record.id}_{entry_name}"
        counter = 1
        while entry_name in used:
            entry_name = f"{record.id}_{record.name} ({counter}){record.file_type}"
            counter += 1
        used.add(entry_name)
        named.append((record, entry_name))
    return named


def archive_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"files_{now:%Y%m%d_%H%M%S}.zip"


async def build_archive(records: list[FileSnapshot], storage: FileStorageService) -> ArchiveDownload:
    """Zip ``records`` into memory. Any I/O error aborts the whole archive."""
    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for record, entry_name in assign_entry_names(records):
                with archive.open(entry_name, "w", force_zip64=True) as entry:
                    async for chunk in storage.iter_chunks(record.file_path):
                        entry.write(chunk)
    except (OSError, RuntimeError, zipfile.BadZipFile) as e:
        raise ArchiveFailureError(f"Failed to build archive: {e}") from e

    logger.info("Built archive with %d entries (%d bytes)", len(records), buffer.tell())
    return ArchiveDownload(content=buffer.getvalue(), filename=archive_filename())


async def build_download(
    records: list[FileSnapshot],
    storage: FileStorageService,
) -> FileDownload | ArchiveDownload:
    """One record is served as-is; more than one becomes a zip."""
    if not records:
        raise ValueError("build_download needs at least one record")
    if len(records) == 1:
        return single_file_download(records[0])
    return await build_archive(records, storage)
