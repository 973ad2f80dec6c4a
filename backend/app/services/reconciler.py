"""Catalog/disk reconciliation for batch reads.

The catalog does not guarantee a backing file exists, so batch downloads check
both stores first and refuse to serve anything unless every requested id is
present in the catalog and on disk.
"""
from dataclasses import dataclass, field

from app.errors import CatalogMissingError, DiskMissingError
from app.services.catalog import FileCatalog, FileSnapshot
from app.services.file_storage import FileStorageService


@dataclass
class Reconciliation:
    requested_ids: list[int]
    requested_count: int = 0
    valid: list[FileSnapshot] = field(default_factory=list)
    catalog_missing: list[int] = field(default_factory=list)
    disk_missing: list[FileSnapshot] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.catalog_missing and not self.disk_missing

    def ensure_complete(self) -> list[FileSnapshot]:
        """Return the valid records, or raise if anything is missing anywhere."""
        if self.catalog_missing:
            found = len(self.valid) + len(self.disk_missing)
            raise CatalogMissingError(self.catalog_missing, found, self.requested_count)
        if self.disk_missing:
            raise DiskMissingError(self.disk_missing, self.valid)
        return self.valid


async def reconcile(
    requested_ids: list[int],
    catalog: FileCatalog,
    storage: FileStorageService,
) -> Reconciliation:
    """Partition ``requested_ids`` into valid, catalog-missing and disk-missing."""
    unique_ids = list(dict.fromkeys(requested_ids))
    records = await catalog.find_by_ids(unique_ids)
    found_ids = {r.id for r in records}

    result = Reconciliation(
        requested_ids=unique_ids,
        requested_count=len(requested_ids),
        catalog_missing=[i for i in unique_ids if i not in found_ids],
    )
    for record in records:
        if await storage.exists(record.file_path):
            result.valid.append(record)
        else:
            result.disk_missing.append(record)
    return result
