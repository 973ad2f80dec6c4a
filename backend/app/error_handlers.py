"""Map file service exceptions to HTTP responses.

Expected errors go back with enough detail to fix the request. Archive and
unexpected failures are logged here and returned as a generic 500.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.errors import (
    ArchiveFailureError,
    ConflictError,
    DiskInconsistencyError,
    FileServiceError,
    NotFoundError,
    PathRejectedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    NotFoundError: 404,
    DiskInconsistencyError: 404,
    ConflictError: 409,
    ValidationError: 400,
    PathRejectedError: 400,
}


def status_code_for(exc: FileServiceError) -> int:
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


async def file_service_error_handler(request: Request, exc: FileServiceError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
        if isinstance(exc, ArchiveFailureError):
            message = "An error occurred while creating the ZIP archive."
        else:
            message = "An internal error occurred."
        return JSONResponse(status_code=status_code, content={"error": message})
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "An internal error occurred."})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FileServiceError, file_service_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
