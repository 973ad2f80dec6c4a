"""File operations: list, get, register, update, delete, download.

Mutations run PathPolicy -> catalog -> filesystem as separate steps. A crash
between the catalog write and the filesystem write leaves the two stores out
of sync; downloads detect that through the reconciler.
"""
import logging
from datetime import date, datetime
from typing import Optional, Union

from app.errors import ConflictError, DiskMissingError, NotFoundError, ValidationError
from app.schemas.file import FileCreate, FileUpdate
from app.services.archive_builder import (
    ArchiveDownload,
    FileDownload,
    build_download,
    single_file_download,
)
from app.services.catalog import FileCatalog, FileSnapshot
from app.services.file_storage import FileStorageService
from app.services.path_policy import (
    DEFAULT_FILE_TYPE,
    compose_path,
    derive_name_and_type,
    is_directory_path,
    normalize_extension,
    resolve_path,
)
from app.services.query_filter import build_file_filter
from app.services.reconciler import reconcile
from app.services.validation import (
    validate_download_ids,
    validate_file_create,
    validate_file_path,
    validate_file_type,
    validate_file_update,
    validate_name,
)

logger = logging.getLogger(__name__)


class FileService:
    def __init__(self, catalog: FileCatalog, storage: FileStorageService):
        self.catalog = catalog
        self.storage = storage

    async def list_files(
        self,
        search: Optional[str] = None,
        file_types: Optional[str] = None,
        min_created: Optional[Union[date, datetime]] = None,
    ) -> list[FileSnapshot]:
        return await self.catalog.filter(build_file_filter(search, file_types, min_created))

    async def get_file(self, file_id: int) -> FileSnapshot:
        record = await self.catalog.find_by_id(file_id)
        if record is None:
            raise NotFoundError(file_id)
        return record

    async def register_file(self, body: FileCreate) -> FileSnapshot:
        """Catalog a file, creating an empty one on disk if nothing is there yet."""
        errors = validate_file_create(body)
        if errors:
            raise ValidationError(errors)

        if body.name is None and is_directory_path(body.file_path):
            raise ValidationError(["A name is required when the file path is a directory."])

        name, file_type = body.name, normalize_extension(body.file_type)
        if body.file_path is not None and not is_directory_path(body.file_path):
            derived_name, derived_type = derive_name_and_type(body.file_path)
            if name is None:
                name = derived_name
            file_type = file_type or derived_type
        file_type = file_type or DEFAULT_FILE_TYPE

        errors = validate_name(name) + validate_file_type(file_type)
        if errors:
            raise ValidationError(errors)

        if body.file_path is None:
            candidate = compose_path(self.storage.root, name, file_type)
        elif is_directory_path(body.file_path):
            candidate = compose_path(body.file_path, name, file_type)
        else:
            candidate = body.file_path

        file_path = self._resolve(candidate)
        await self._ensure_path_free(file_path)
        await self._ensure_not_directory(file_path)

        record = await self.catalog.create(name=name, file_type=file_type, file_path=file_path)
        try:
            await self.storage.create_empty(file_path)
        except OSError as e:
            await self.catalog.delete(record.id)
            logger.warning("Could not create %s, registration of %d undone: %s", file_path, record.id, e)
            if isinstance(e, (IsADirectoryError, NotADirectoryError, FileExistsError)):
                raise ValidationError([f"Cannot create a file at '{file_path}'."]) from e
            raise
        logger.info("Registered file %d at %s", record.id, file_path)
        return record

    async def update_file(self, file_id: int, body: FileUpdate) -> FileSnapshot:
        """Rename, retype and/or move a file. Moving on disk is best effort."""
        current = await self.get_file(file_id)

        errors = validate_file_update(body)
        new_type = current.file_type
        if body.file_type is not None:
            new_type = normalize_extension(body.file_type)
            errors += validate_file_type(new_type)
        if errors:
            raise ValidationError(errors)
        new_name = body.name if body.name is not None else current.name

        changes = {}
        if new_name != current.name:
            changes["name"] = new_name
        if new_type != current.file_type:
            changes["file_type"] = new_type

        if body.file_path is not None:
            candidate = body.file_path
            if is_directory_path(candidate):
                candidate = compose_path(candidate, new_name, new_type)
            new_path = self._resolve(candidate)
            if new_path != current.file_path:
                await self._ensure_path_free(new_path, exclude_id=file_id)
                await self._ensure_not_directory(new_path)
                if await self.storage.exists(new_path):
                    raise ConflictError(f"A file already exists at '{new_path}'.")
                changes["file_path"] = new_path

        updated = await self.catalog.update(file_id, changes)

        if "file_path" in changes:
            try:
                await self.storage.move(current.file_path, updated.file_path)
            except OSError as e:
                logger.warning(
                    "Catalog updated but moving %s to %s failed: %s",
                    current.file_path, updated.file_path, e,
                )
        return updated

    async def delete_file(self, file_id: int) -> None:
        """Drop the catalog row, then try to remove the backing file."""
        current = await self.get_file(file_id)
        if not await self.catalog.delete(file_id):
            raise NotFoundError(file_id)
        if not await self.storage.delete(current.file_path):
            logger.warning("File %d removed from catalog but %s remains on disk", file_id, current.file_path)

    async def download_files(self, file_ids: Optional[list[int]]) -> Union[FileDownload, ArchiveDownload]:
        """Serve every requested file, or nothing at all."""
        errors = validate_download_ids(file_ids)
        if errors:
            raise ValidationError(errors)

        reconciliation = await reconcile(file_ids, self.catalog, self.storage)
        if not reconciliation.is_complete:
            logger.info(
                "Download refused: catalog missing %s, disk missing %s",
                reconciliation.catalog_missing,
                [r.id for r in reconciliation.disk_missing],
            )
        records = reconciliation.ensure_complete()
        return await build_download(records, self.storage)

    async def download_file(self, file_id: int) -> FileDownload:
        record = await self.get_file(file_id)
        if not await self.storage.exists(record.file_path):
            raise DiskMissingError([record])
        return single_file_download(record)

    def _resolve(self, candidate: str) -> str:
        file_path = resolve_path(candidate, self.storage.root)
        errors = validate_file_path(file_path)
        if errors:
            raise ValidationError(errors)
        return file_path

    async def _ensure_path_free(self, file_path: str, exclude_id: Optional[int] = None) -> None:
        existing = await self.catalog.find_by_path(file_path)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(f"File path '{file_path}' is already registered (ID {existing.id}).")

    async def _ensure_not_directory(self, file_path: str) -> None:
        if await self.storage.is_directory(file_path):
            raise ValidationError([f"'{file_path}' is a directory; add a trailing '/' to place a file inside it."])
