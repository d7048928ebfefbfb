"""
Custom exceptions for the Chunked Upload API.
Each failure kind carries a stable code so clients can decide whether to
retry, resume or restart an upload.
"""
from typing import List


class ChunkedUploadException(Exception):
    """Base exception for all application errors."""
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationException(ChunkedUploadException):
    """Raised when request data validation fails."""
    code = "VALIDATION_ERROR"


class InvalidChunkSizeException(ValidationException):
    """Raised when a chunk payload has an unacceptable length."""
    code = "INVALID_CHUNK_SIZE"


class InvalidChunkIndexException(ChunkedUploadException):
    """Raised when a chunk index falls outside [0, total_chunks)."""
    code = "INVALID_CHUNK_INDEX"

    def __init__(self, chunk_index: int, total_chunks: int):
        self.chunk_index = chunk_index
        self.total_chunks = total_chunks
        super().__init__(
            f"Invalid chunk index {chunk_index}: must be between 0 and {total_chunks - 1}"
        )


class SessionNotFoundException(ChunkedUploadException):
    """Raised when an upload session does not exist, is terminal or has expired."""
    code = "SESSION_NOT_FOUND"

    def __init__(self, upload_id: str):
        self.upload_id = upload_id
        super().__init__(f"Upload session '{upload_id}' not found or expired")


class IncompleteUploadException(ChunkedUploadException):
    """Raised when assembly is requested before every chunk has arrived."""
    code = "INCOMPLETE_UPLOAD"

    def __init__(self, missing_chunks: List[int]):
        self.missing_chunks = missing_chunks
        super().__init__(f"Missing chunks: {', '.join(str(i) for i in missing_chunks)}")


class SizeMismatchException(ChunkedUploadException):
    """Raised when the assembled file size differs from the declared size."""
    code = "SIZE_MISMATCH"

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"File size mismatch. Expected: {expected}, Got: {actual}")


class StorageException(ChunkedUploadException):
    """Raised when an object storage operation fails."""
    code = "STORAGE_ERROR"


class DynamoDBException(ChunkedUploadException):
    """Raised when DynamoDB operation fails."""
    code = "DATABASE_ERROR"
