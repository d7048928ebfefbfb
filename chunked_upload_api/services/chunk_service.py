"""
Chunk Service.
Receives individual chunks of an upload, in any order and with retries.
"""
import logging
from chunked_upload_api.core import config
from chunked_upload_api.core.exceptions import (
    InvalidChunkIndexException,
    InvalidChunkSizeException,
    SessionNotFoundException
)
from chunked_upload_api.models.dto.upload_dto import ChunkUploadResponse
from chunked_upload_api.models.upload_session import UploadSession
from chunked_upload_api.repositories.session_repository import SessionRepository
from chunked_upload_api.repositories.storage_repository import StorageRepository
from chunked_upload_api.services.session_service import SessionService

logger = logging.getLogger(__name__)


class ChunkService:
    """Service for storing chunks against an open upload session."""

    def __init__(
        self,
        session_service: SessionService,
        session_repository: SessionRepository,
        storage_repository: StorageRepository
    ):
        self.session_service = session_service
        self.session_repository = session_repository
        self.storage_repository = storage_repository

    def store_chunk(self, upload_id: str, chunk_index: int, payload: bytes) -> ChunkUploadResponse:
        """
        Store one chunk of an upload.

        Storing an index that was already received returns the current status
        without rewriting the artifact.

        Args:
            upload_id: Upload session identifier
            chunk_index: Zero-based chunk position
            payload: Raw chunk bytes

        Returns:
            ChunkUploadResponse with progress; is_complete is advisory

        Raises:
            SessionNotFoundException: If the session is absent or expired
            InvalidChunkIndexException: If chunk_index is out of range
            InvalidChunkSizeException: If the payload length is not acceptable
        """
        session = self.session_service.get_live_session(upload_id)

        if not 0 <= chunk_index < session.total_chunks:
            raise InvalidChunkIndexException(chunk_index, session.total_chunks)

        self._validate_payload_length(session, chunk_index, len(payload))

        if chunk_index in session.received_chunks:
            logger.info("Chunk %d of upload %s already received", chunk_index, upload_id)
            return self._to_response(session, chunk_index, "Chunk already uploaded")

        key = session.chunk_key(chunk_index)
        self.storage_repository.put_object(key, payload)

        result = self.session_repository.add_received_chunk(upload_id, chunk_index)
        if result is None:
            # Cancelled or swept while the artifact was being written
            self.storage_repository.delete_object(key)
            raise SessionNotFoundException(upload_id)

        added, session = result
        if not added:
            logger.info("Chunk %d of upload %s recorded by a concurrent request", chunk_index, upload_id)

        logger.debug(
            "Stored chunk %d of upload %s (%d/%d)",
            chunk_index, upload_id, session.uploaded_count, session.total_chunks
        )
        return self._to_response(session, chunk_index, "Chunk uploaded successfully")

    def _validate_payload_length(self, session: UploadSession, chunk_index: int, length: int) -> None:
        if length == 0:
            raise InvalidChunkSizeException(f"Chunk {chunk_index} is empty")

        if config.settings.enforce_exact_chunk_length:
            expected = session.expected_chunk_length(chunk_index)
            if length != expected:
                raise InvalidChunkSizeException(
                    f"Chunk {chunk_index} must be {expected} bytes, got: {length}"
                )
        elif length > session.chunk_size:
            raise InvalidChunkSizeException(
                f"Chunk {chunk_index} exceeds the negotiated chunk size of {session.chunk_size} bytes, got: {length}"
            )

    def _to_response(self, session: UploadSession, chunk_index: int, message: str) -> ChunkUploadResponse:
        return ChunkUploadResponse(
            message=message,
            chunk_index=chunk_index,
            uploaded_count=session.uploaded_count,
            total_chunks=session.total_chunks,
            progress=session.progress,
            is_complete=session.is_complete
        )
