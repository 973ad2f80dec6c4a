"""Error taxonomy for the file catalog.

These exceptions carry everything a caller needs to correct the request.
They know nothing about HTTP; ``app.error_handlers`` maps them to status codes.
"""
from typing import Optional


class FileServiceError(Exception):
    """Base class for all expected file service failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class NotFoundError(FileServiceError):
    """Requested id is absent from the catalog."""

    def __init__(self, file_id: int):
        super().__init__(f"File with ID {file_id} not found.")
        self.file_id = file_id


class ConflictError(FileServiceError):
    """Another record (or an uncatalogued file) already owns the target path."""


class ValidationError(FileServiceError):
    """One or more field constraints failed."""

    def __init__(self, errors: list[str]):
        super().__init__("Validation failed.")
        self.errors = errors

    def to_dict(self) -> dict:
        return {"error": self.message, "errors": self.errors}


class PathRejectedError(FileServiceError):
    """Candidate path resolves outside the storage root."""

    def __init__(self, candidate: str, root: str):
        super().__init__(f"Path '{candidate}' is outside the storage root.")
        self.candidate = candidate
        self.root = root


class DiskInconsistencyError(FileServiceError):
    """Catalog and disk disagree about the requested files."""


class CatalogMissingError(DiskInconsistencyError):
    """Some requested ids have no catalog record."""

    def __init__(self, missing_ids: list[int], found_count: int, requested_count: int):
        super().__init__("Some files not found in the catalog.")
        self.missing_ids = missing_ids
        self.found_count = found_count
        self.requested_count = requested_count

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "missingIds": self.missing_ids,
            "foundCount": self.found_count,
            "requestedCount": self.requested_count,
        }


class DiskMissingError(DiskInconsistencyError):
    """Catalog records exist but their backing files do not."""

    def __init__(self, missing_files: list, available_files: Optional[list] = None):
        super().__init__("Some files were not found on disk.")
        self.missing_files = missing_files
        self.available_files = available_files or []

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "missingFiles": [
                {"id": f.id, "name": f.name, "filePath": f.file_path}
                for f in self.missing_files
            ],
            "availableFiles": [{"id": f.id, "name": f.name} for f in self.available_files],
        }


class ArchiveFailureError(FileServiceError):
    """I/O failure while assembling a zip archive."""
