"""
Abstract base class for object storage repositories.
Keys are slash-separated paths relative to the storage root or bucket.
"""
from abc import ABC, abstractmethod
from typing import BinaryIO, Optional


class StorageRepository(ABC):
    """Abstract repository interface for chunk artifacts and assembled files."""

    @abstractmethod
    def put_object(self, key: str, data: bytes) -> None:
        """Write ``data`` under ``key``, replacing any existing object."""
        pass

    @abstractmethod
    def get_object(self, key: str) -> bytes:
        """Read the whole object stored under ``key``."""
        pass

    @abstractmethod
    def upload_fileobj(self, file: BinaryIO, key: str, content_type: Optional[str] = None) -> None:
        """Stream a file-like object into ``key``."""
        pass

    @abstractmethod
    def get_object_size(self, key: str) -> Optional[int]:
        """Size in bytes, or None if the object does not exist."""
        pass

    @abstractmethod
    def delete_object(self, key: str) -> None:
        """Delete one object. No-op if absent."""
        pass

    @abstractmethod
    def delete_prefix(self, prefix: str) -> int:
        """Delete every object under ``prefix``. Returns the number deleted."""
        pass

    @abstractmethod
    def get_url(self, key: str) -> str:
        """Public URL for ``key``."""
        pass
