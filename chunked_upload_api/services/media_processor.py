"""
Contract for post-assembly media processing (thumbnails, duration probing).
Transcoding itself runs outside this service.
"""
from abc import ABC, abstractmethod
from typing import Optional


class MediaMetadata:
    """Facts derived from an assembled video."""

    def __init__(self, duration_seconds: Optional[float] = None, thumbnail_url: Optional[str] = None):
        self.duration_seconds = duration_seconds
        self.thumbnail_url = thumbnail_url

    def __repr__(self):
        return f"MediaMetadata(duration_seconds={self.duration_seconds}, thumbnail_url={self.thumbnail_url})"


class MediaProcessor(ABC):
    """Derives metadata for an assembled upload."""

    @abstractmethod
    def process(self, file_url: str, mime_type: str) -> Optional[MediaMetadata]:
        """Return metadata, or None when nothing could be derived."""
        pass
