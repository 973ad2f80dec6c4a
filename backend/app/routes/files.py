"""Files API routes."""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.common import DeleteResponse
from app.schemas.file import DownloadRequest, FileCreate, FileResponse as FileResponseSchema, FileUpdate
from app.services.archive_builder import ArchiveDownload, FileDownload
from app.services.catalog import FileCatalog
from app.services.file_service import FileService
from app.services.file_storage import file_storage

router = APIRouter(prefix="/api/files", tags=["files"])


def get_file_service(db: AsyncSession = Depends(get_db)) -> FileService:
    """FastAPI dependency wiring the catalog to the shared storage root."""
    return FileService(FileCatalog(db), file_storage)


@router.get("", response_model=list[FileResponseSchema])
async def list_files(
    search: Optional[str] = Query(None, description="Substring of name or path"),
    file_type: Optional[str] = Query(None, alias="fileType", description="e.g. 'image,txt'"),
    min_created: Optional[datetime] = Query(None, alias="minCreated"),
    service: FileService = Depends(get_file_service),
):
    """List files, optionally filtered by search text, type/category and creation date."""
    return await service.list_files(search=search, file_types=file_type, min_created=min_created)


@router.get("/{file_id}", response_model=FileResponseSchema)
async def get_file(file_id: int, service: FileService = Depends(get_file_service)):
    """Get file metadata by ID."""
    return await service.get_file(file_id)


@router.post("", response_model=FileResponseSchema, status_code=201)
async def register_file(body: FileCreate, service: FileService = Depends(get_file_service)):
    """Register a file by path, or by name and type."""
    return await service.register_file(body)


@router.put("/{file_id}", response_model=FileResponseSchema)
async def update_file(
    file_id: int,
    body: FileUpdate,
    service: FileService = Depends(get_file_service),
):
    """Update a file. Only provided fields are changed; a new path moves the file."""
    return await service.update_file(file_id, body)


@router.delete("/{file_id}", response_model=DeleteResponse)
async def delete_file(file_id: int, service: FileService = Depends(get_file_service)):
    """Delete a file record and its backing file."""
    await service.delete_file(file_id)
    return {"deleted": True, "id": file_id}


@router.post("/download")
async def download_files(body: DownloadRequest, service: FileService = Depends(get_file_service)):
    """Download one or more files. Several files are returned as a zip."""
    return _to_response(await service.download_files(body.ids))


@router.get("/{file_id}/download")
async def download_file(file_id: int, service: FileService = Depends(get_file_service)):
    """Download a single file by ID."""
    return _to_response(await service.download_file(file_id))


def _to_response(download: FileDownload | ArchiveDownload) -> Response:
    if isinstance(download, ArchiveDownload):
        return Response(
            content=download.content,
            media_type=download.media_type,
            headers={"Content-Disposition": f'attachment; filename="{download.filename}"'},
        )
    return FileResponse(
        path=download.path,
        filename=download.filename,
        media_type=download.media_type,
    )
