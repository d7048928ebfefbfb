"""
Upload Session domain model.
Represents one in-progress chunked upload and its received chunks.
"""
from datetime import datetime
from typing import Iterable, List, Optional, Set


class UploadSession:
    """Domain model for chunked upload session tracking."""

    STATUS_OPEN = "open"
    STATUS_ASSEMBLING = "assembling"

    def __init__(
        self,
        upload_id: str,
        file_name: str,
        total_size: int,
        chunk_size: int,
        total_chunks: int,
        mime_type: str,
        created_at: datetime,
        expires_at: datetime,
        storage_prefix: str,
        received_chunks: Optional[Iterable[int]] = None,
        status: str = STATUS_OPEN
    ):
        self.upload_id = upload_id
        self.file_name = file_name
        self.total_size = total_size
        self.chunk_size = chunk_size
        self.total_chunks = total_chunks
        self.mime_type = mime_type
        self.created_at = created_at
        self.expires_at = expires_at
        self.storage_prefix = storage_prefix
        self.received_chunks: Set[int] = set(received_chunks or ())
        self.status = status

    @property
    def uploaded_count(self) -> int:
        return len(self.received_chunks)

    @property
    def is_complete(self) -> bool:
        return self.uploaded_count == self.total_chunks

    @property
    def progress(self) -> float:
        """Percentage of chunks received, rounded to two decimals."""
        return round(self.uploaded_count / self.total_chunks * 100, 2)

    def missing_chunks(self) -> List[int]:
        """Sorted indices not yet received."""
        return [i for i in range(self.total_chunks) if i not in self.received_chunks]

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at < now

    def expected_chunk_length(self, chunk_index: int) -> int:
        """Exact byte length the chunk at ``chunk_index`` should have."""
        if chunk_index < self.total_chunks - 1:
            return self.chunk_size
        return self.total_size - self.chunk_size * (self.total_chunks - 1)

    def chunk_key(self, chunk_index: int) -> str:
        return f"{self.storage_prefix}/chunk_{chunk_index:05d}"

    def __repr__(self):
        return (
            f"UploadSession(upload_id={self.upload_id}, file_name={self.file_name}, "
            f"received={self.uploaded_count}/{self.total_chunks}, status={self.status})"
        )
