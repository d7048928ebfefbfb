"""
Global exception handler for the Chunked Upload API.
Maps every failure kind to a distinct status code and error code.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from .exceptions import (
    ChunkedUploadException,
    DynamoDBException,
    IncompleteUploadException,
    InvalidChunkIndexException,
    SessionNotFoundException,
    SizeMismatchException,
    StorageException,
    ValidationException
)

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: str, exc: ChunkedUploadException, **extra) -> JSONResponse:
    content = {"error": error, "code": exc.code, "message": exc.message}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""

    @app.exception_handler(SessionNotFoundException)
    async def handle_not_found(request: Request, exc: SessionNotFoundException):
        return _error_response(404, "Not Found", exc, upload_id=exc.upload_id)

    @app.exception_handler(ValidationException)
    async def handle_validation_error(request: Request, exc: ValidationException):
        return _error_response(400, "Validation Error", exc)

    @app.exception_handler(InvalidChunkIndexException)
    async def handle_invalid_chunk_index(request: Request, exc: InvalidChunkIndexException):
        return _error_response(
            400, "Invalid Chunk Index", exc,
            chunk_index=exc.chunk_index, total_chunks=exc.total_chunks
        )

    @app.exception_handler(IncompleteUploadException)
    async def handle_incomplete_upload(request: Request, exc: IncompleteUploadException):
        return _error_response(409, "Incomplete Upload", exc, missing_chunks=exc.missing_chunks)

    @app.exception_handler(SizeMismatchException)
    async def handle_size_mismatch(request: Request, exc: SizeMismatchException):
        return _error_response(
            422, "Size Mismatch", exc,
            expected_size=exc.expected, actual_size=exc.actual
        )

    @app.exception_handler(StorageException)
    async def handle_storage_error(request: Request, exc: StorageException):
        logger.error("Storage error on %s: %s", request.url.path, exc.message)
        return _error_response(500, "Storage Error", exc)

    @app.exception_handler(DynamoDBException)
    async def handle_dynamodb_error(request: Request, exc: DynamoDBException):
        logger.error("Database error on %s: %s", request.url.path, exc.message)
        return _error_response(500, "Database Error", exc)

    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "code": ChunkedUploadException.code,
                "message": "An unexpected error occurred"
            }
        )
