"""
Abstract base class for upload session repositories.
Defines the contract for session metadata storage operations.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from chunked_upload_api.models.upload_session import UploadSession


class SessionRepository(ABC):
    """Abstract repository interface for upload session metadata.

    Implementations must make ``add_received_chunk``, ``claim_for_assembly`` and
    ``delete`` atomic with respect to concurrent callers.
    """

    @abstractmethod
    def create(self, session: UploadSession) -> None:
        """Persist a new session. Fails if the upload_id already exists."""
        pass

    @abstractmethod
    def get_by_id(self, upload_id: str) -> Optional[UploadSession]:
        """Return the session or None."""
        pass

    @abstractmethod
    def add_received_chunk(self, upload_id: str, chunk_index: int) -> Optional[Tuple[bool, UploadSession]]:
        """
        Add ``chunk_index`` to the received set if absent.

        Returns:
            (added, session after the update), or None if the session no longer exists
        """
        pass

    @abstractmethod
    def claim_for_assembly(self, upload_id: str) -> bool:
        """Move an open session to assembling. False if absent or already claimed."""
        pass

    @abstractmethod
    def release_claim(self, upload_id: str) -> None:
        """Return an assembling session to open. No-op if the session is gone."""
        pass

    @abstractmethod
    def delete(self, upload_id: str) -> Optional[UploadSession]:
        """Delete a session. Returns the removed session, or None if this call removed nothing."""
        pass

    @abstractmethod
    def list_expired(self, now: datetime) -> List[str]:
        """Return upload_ids whose expires_at is before ``now``."""
        pass
