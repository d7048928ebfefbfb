"""
Upload Session Service.
Opens, inspects, cancels and expires chunked upload sessions.
"""
import logging
import math
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from chunked_upload_api.core import config
from chunked_upload_api.core.exceptions import SessionNotFoundException, ValidationException
from chunked_upload_api.models.dto.upload_dto import InitializeUploadResponse, UploadStatusResponse
from chunked_upload_api.models.upload_session import UploadSession
from chunked_upload_api.repositories.session_repository import SessionRepository
from chunked_upload_api.repositories.storage_repository import StorageRepository

logger = logging.getLogger(__name__)

MAX_FILE_NAME_LENGTH = 255


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_upload_id(upload_id: str) -> bool:
    """Upload ids are UUID strings; anything else cannot name a session."""
    try:
        return str(uuid.UUID(upload_id)) == upload_id.lower()
    except (ValueError, AttributeError, TypeError):
        return False


class SessionService:
    """Service for upload session lifecycle operations."""

    def __init__(
        self,
        session_repository: SessionRepository,
        storage_repository: StorageRepository,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.session_repository = session_repository
        self.storage_repository = storage_repository
        self.clock = clock or utc_now

    def initialize(
        self,
        file_name: str,
        total_size: int,
        mime_type: str,
        chunk_size: Optional[int] = None
    ) -> InitializeUploadResponse:
        """
        Open a new upload session.

        Args:
            file_name: Original client file name
            total_size: Declared size of the complete file in bytes
            mime_type: Declared content type, must be in the allow-list
            chunk_size: Bytes per chunk, defaults to the server maximum

        Returns:
            InitializeUploadResponse with the upload_id and chunk layout

        Raises:
            ValidationException: If any input is out of bounds
        """
        settings = config.settings
        file_name = (file_name or "").strip()
        if not file_name:
            raise ValidationException("file_name cannot be empty")
        if len(file_name) > MAX_FILE_NAME_LENGTH:
            raise ValidationException(f"file_name must be at most {MAX_FILE_NAME_LENGTH} characters")

        if total_size <= 0 or total_size > settings.max_file_size_bytes:
            raise ValidationException(
                f"file_size must be between 1 and {settings.max_file_size_bytes} bytes, got: {total_size}"
            )

        if mime_type not in settings.allowed_mime_types:
            raise ValidationException(
                f"mime_type must be one of: {', '.join(settings.allowed_mime_types)}"
            )

        max_chunk_size = settings.default_chunk_size_bytes
        if chunk_size is None:
            chunk_size = max_chunk_size
        elif chunk_size <= 0 or chunk_size > max_chunk_size:
            raise ValidationException(
                f"chunk_size must be between 1 and {max_chunk_size} bytes, got: {chunk_size}"
            )

        upload_id = str(uuid.uuid4())
        now = self.clock()
        session = UploadSession(
            upload_id=upload_id,
            file_name=file_name,
            total_size=total_size,
            chunk_size=chunk_size,
            total_chunks=math.ceil(total_size / chunk_size),
            mime_type=mime_type,
            created_at=now,
            expires_at=now + timedelta(hours=settings.upload_session_ttl_hours),
            storage_prefix=f"{settings.chunk_prefix}/{upload_id}"
        )
        self.session_repository.create(session)

        logger.info(
            "Initialized upload %s for %s (%d bytes, %d chunks)",
            upload_id, file_name, total_size, session.total_chunks
        )

        return InitializeUploadResponse(
            upload_id=upload_id,
            total_chunks=session.total_chunks,
            chunk_size=chunk_size,
            expires_at=session.expires_at
        )

    def get_live_session(self, upload_id: str) -> UploadSession:
        """
        Load a session that exists and has not expired.

        Raises:
            SessionNotFoundException: If absent or expired
        """
        if not is_valid_upload_id(upload_id):
            raise SessionNotFoundException(upload_id)

        session = self.session_repository.get_by_id(upload_id)
        if session is None or session.is_expired(self.clock()):
            raise SessionNotFoundException(upload_id)
        return session

    def get_status(self, upload_id: str) -> UploadStatusResponse:
        """Snapshot of an upload session, used by clients to resume."""
        session = self.get_live_session(upload_id)

        return UploadStatusResponse(
            upload_id=session.upload_id,
            file_name=session.file_name,
            total_size=session.total_size,
            total_chunks=session.total_chunks,
            uploaded_chunks=sorted(session.received_chunks),
            uploaded_count=session.uploaded_count,
            progress=session.progress,
            is_complete=session.is_complete,
            expires_at=session.expires_at
        )

    def cancel(self, upload_id: str) -> None:
        """
        Cancel an upload and remove all of its state.
        Idempotent: cancelling an unknown upload is a no-op.
        """
        if not is_valid_upload_id(upload_id):
            logger.info("Cancel for malformed upload id ignored")
            return

        removed = self.session_repository.delete(upload_id)
        # Artifacts go after metadata so a racing chunk store cannot re-register
        self.storage_repository.delete_prefix(self._storage_prefix(upload_id, removed))

        if removed:
            logger.info("Cancelled upload %s", upload_id)
        else:
            logger.info("Cancel for unknown upload %s ignored", upload_id)

    def sweep_expired(self, now: Optional[datetime] = None) -> int:
        """
        Delete every session whose expiry has passed.

        Returns:
            Number of sessions removed by this sweep
        """
        now = now or self.clock()
        cleaned = 0

        for upload_id in self.session_repository.list_expired(now):
            removed = self.session_repository.delete(upload_id)
            if removed:
                cleaned += 1
            self.storage_repository.delete_prefix(self._storage_prefix(upload_id, removed))

        logger.info("Expired upload sweep removed %d sessions", cleaned)
        return cleaned

    def _storage_prefix(self, upload_id: str, session: Optional[UploadSession] = None) -> str:
        # The recorded prefix wins over the current CHUNK_PREFIX
        if session is not None:
            return session.storage_prefix
        return f"{config.settings.chunk_prefix}/{upload_id}"
