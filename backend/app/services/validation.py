"""Field validators for file requests.

Each validator returns a list of human-readable field errors; an empty list
means the input is acceptable. Callers raise ``ValidationError`` themselves.
"""
from typing import Optional

from app.models.file_record import FILE_PATH_MAX_LENGTH, FILE_TYPE_MAX_LENGTH, NAME_MAX_LENGTH
from app.schemas.file import FileCreate, FileUpdate

FILE_TYPE_MIN_LENGTH = 2
FORBIDDEN_NAME_CHARS = set('/\\:*?"<>|\0')


def validate_name(name: Optional[str], required: bool = True) -> list[str]:
    if name is None:
        return ["Name is required."] if required else []
    errors = []
    if not name.strip():
        errors.append("Name must not be empty.")
    if len(name) > NAME_MAX_LENGTH:
        errors.append(f"Name must be at most {NAME_MAX_LENGTH} characters.")
    if FORBIDDEN_NAME_CHARS & set(name):
        errors.append("Name contains characters that are not allowed in file names.")
    return errors


def validate_file_type(file_type: Optional[str]) -> list[str]:
    """Checks the normalized form (leading dot included)."""
    if file_type is None:
        return []
    errors = []
    if not FILE_TYPE_MIN_LENGTH <= len(file_type) <= FILE_TYPE_MAX_LENGTH:
        errors.append(
            f"File type must be between {FILE_TYPE_MIN_LENGTH} and {FILE_TYPE_MAX_LENGTH} characters."
        )
    if FORBIDDEN_NAME_CHARS & set(file_type):
        errors.append("File type contains characters that are not allowed in file names.")
    return errors


def validate_file_path(file_path: Optional[str]) -> list[str]:
    if file_path is None:
        return []
    if not file_path.strip():
        return ["File path must not be empty."]
    if len(file_path) > FILE_PATH_MAX_LENGTH:
        return [f"File path must be at most {FILE_PATH_MAX_LENGTH} characters."]
    return []


def validate_file_create(body: FileCreate) -> list[str]:
    if body.file_path is None and body.name is None:
        return ["Either a file path or a name is required."]
    return (
        validate_name(body.name, required=False)
        + validate_file_path(body.file_path)
    )


def validate_file_update(body: FileUpdate) -> list[str]:
    return (
        validate_name(body.name, required=False)
        + validate_file_path(body.file_path)
    )


def validate_download_ids(ids: Optional[list[int]]) -> list[str]:
    if not ids:
        return ["At least one file ID is required."]
    return []
