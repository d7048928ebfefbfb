"""
Assembly Service.
Concatenates every chunk of a complete upload into its final file.
"""
import logging
import posixpath
import tempfile
import uuid
from typing import BinaryIO
from chunked_upload_api.core import config
from chunked_upload_api.core.exceptions import (
    IncompleteUploadException,
    SessionNotFoundException,
    SizeMismatchException,
    ValidationException
)
from chunked_upload_api.models.assembled_file import AssembledFile
from chunked_upload_api.models.upload_session import UploadSession
from chunked_upload_api.repositories.session_repository import SessionRepository
from chunked_upload_api.repositories.storage_repository import StorageRepository
from chunked_upload_api.services.session_service import SessionService

logger = logging.getLogger(__name__)


class AssemblyService:
    """Service for assembling uploaded chunks into permanent storage."""

    def __init__(
        self,
        session_service: SessionService,
        session_repository: SessionRepository,
        storage_repository: StorageRepository
    ):
        self.session_service = session_service
        self.session_repository = session_repository
        self.storage_repository = storage_repository

    def complete(self, upload_id: str, destination_directory: str) -> AssembledFile:
        """
        Assemble a complete upload into ``destination_directory``.

        On success the session and its chunks are deleted. On a size mismatch the
        output is removed and the chunks are kept so the call can be retried.

        Args:
            upload_id: Upload session identifier
            destination_directory: Relative directory for the final file

        Returns:
            AssembledFile describing the stored file

        Raises:
            SessionNotFoundException: If the session is absent, expired or being assembled
            IncompleteUploadException: If chunks are missing
            SizeMismatchException: If the assembled size differs from the declared size
            ValidationException: If the destination directory is invalid
        """
        directory = self._normalize_directory(destination_directory)
        session = self.session_service.get_live_session(upload_id)

        missing = session.missing_chunks()
        if missing:
            raise IncompleteUploadException(missing)

        if not self.session_repository.claim_for_assembly(upload_id):
            logger.warning("Upload %s is already being assembled", upload_id)
            raise SessionNotFoundException(upload_id)

        try:
            assembled = self._assemble(session, directory)
        except Exception:
            self.session_repository.release_claim(upload_id)
            raise

        self.session_repository.delete(upload_id)
        self.storage_repository.delete_prefix(session.storage_prefix)

        logger.info("Completed upload %s as %s (%d bytes)", upload_id, assembled.file_path, assembled.file_size)
        return assembled

    def _assemble(self, session: UploadSession, directory: str) -> AssembledFile:
        extension = posixpath.splitext(session.file_name)[1].lower()
        final_name = f"{uuid.uuid4()}{extension}"
        final_path = f"{directory}/{final_name}"
        spool_limit = config.settings.assembly_spool_max_mb * 1024 * 1024

        with tempfile.SpooledTemporaryFile(max_size=spool_limit) as buffer:
            written = self._concatenate_chunks(session, buffer)
            if written != session.total_size:
                logger.error(
                    "Upload %s assembled to %d bytes, expected %d",
                    session.upload_id, written, session.total_size
                )
                raise SizeMismatchException(session.total_size, written)

            buffer.seek(0)
            self.storage_repository.upload_fileobj(buffer, final_path, session.mime_type)

        actual_size = self.storage_repository.get_object_size(final_path)
        if actual_size != session.total_size:
            self.storage_repository.delete_object(final_path)
            raise SizeMismatchException(session.total_size, actual_size or 0)

        return AssembledFile(
            file_name=final_name,
            file_path=final_path,
            file_url=self.storage_repository.get_url(final_path),
            file_size=actual_size,
            mime_type=session.mime_type
        )

    def _concatenate_chunks(self, session: UploadSession, buffer: BinaryIO) -> int:
        written = 0
        # Index order is what makes the output byte-identical to the original
        for chunk_index in range(session.total_chunks):
            data = self.storage_repository.get_object(session.chunk_key(chunk_index))
            buffer.write(data)
            written += len(data)
        return written

    def _normalize_directory(self, directory: str) -> str:
        normalized = (directory or "").replace("\\", "/").strip("/")
        parts = normalized.split("/")
        if not normalized or any(part in ("", ".", "..") for part in parts):
            raise ValidationException(f"Invalid destination directory: {directory!r}")
        return normalized
