"""File request/response schemas."""
from typing import Optional
from datetime import datetime
from app.schemas.base import CamelModel, CamelORMModel


class FileCreate(CamelModel):
    """Register a file by path, or by name + type with an optional path."""
    name: Optional[str] = None
    file_type: Optional[str] = None
    file_path: Optional[str] = None


class FileUpdate(CamelModel):
    name: Optional[str] = None
    file_type: Optional[str] = None
    file_path: Optional[str] = None


class FileResponse(CamelORMModel):
    id: int
    name: str
    file_type: str
    file_path: str
    time_created: datetime
    time_modified: datetime


class DownloadRequest(CamelModel):
    ids: Optional[list[int]] = None
