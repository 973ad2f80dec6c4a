"""Translate list query parameters into a catalog predicate."""
from datetime import date, datetime, time, timezone
from typing import Optional, Union

from sqlalchemy import ColumnElement, and_, func, or_, true

from app.models.file_record import FileRecord
from app.services.path_policy import normalize_extension

CATEGORY_EXTENSIONS = {
    "audio": {".mp3", ".wav", ".flac", ".aac"},
    "image": {".jpg", ".png", ".gif", ".webp"},
    "video": {".mp4", ".avi", ".mkv", ".webm"},
    "document": {".pdf", ".docx", ".txt", ".md"},
}

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE meta characters so the value matches literally."""
    for char in (LIKE_ESCAPE, "%", "_", "["):
        value = value.replace(char, LIKE_ESCAPE + char)
    return value


def parse_file_type_tokens(file_types: str) -> list[str]:
    """Split 'audio, .TXT,,image' into ['audio', '.txt', 'image']."""
    return [t.strip().lower() for t in file_types.split(",") if t.strip()]


def resolve_extensions(tokens: list[str]) -> set[str]:
    """Expand category tokens; anything else is taken as a literal extension."""
    extensions: set[str] = set()
    for token in tokens:
        if token in CATEGORY_EXTENSIONS:
            extensions |= CATEGORY_EXTENSIONS[token]
        else:
            extensions.add(normalize_extension(token))
    return extensions


def start_of_day_utc(value: Union[date, datetime]) -> datetime:
    """Midnight UTC of the calendar day of ``value``."""
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def build_file_filter(
    search: Optional[str] = None,
    file_types: Optional[str] = None,
    min_created: Optional[Union[date, datetime]] = None,
) -> ColumnElement[bool]:
    """Build an AND of the supplied filters. Omitted filters match everything."""
    clauses = []

    if search:
        pattern = f"%{escape_like(search)}%"
        clauses.append(
            or_(
                FileRecord.name.ilike(pattern, escape=LIKE_ESCAPE),
                FileRecord.file_path.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )

    if file_types:
        extensions = resolve_extensions(parse_file_type_tokens(file_types))
        if extensions:
            clauses.append(func.lower(FileRecord.file_type).in_(sorted(extensions)))

    if min_created is not None:
        clauses.append(FileRecord.time_created >= start_of_day_utc(min_created))

    if not clauses:
        return true()
    return and_(*clauses)
