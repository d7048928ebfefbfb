"""
Domain model for Video entity.
Database-agnostic representation of a published video record.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional


class Video:
    """Domain model representing a video backed by an assembled upload."""

    STATUS_PUBLISHED = "published"

    def __init__(
        self,
        business_id: str,
        video_url: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: str = STATUS_PUBLISHED,
        is_public: bool = True,
        duration_seconds: Optional[float] = None,
        thumbnail_url: Optional[str] = None,
        video_id: Optional[str] = None,
        created_at: Optional[datetime] = None
    ):
        self.video_id = video_id or str(uuid.uuid4())
        self.business_id = business_id
        self.video_url = video_url
        self.title = title
        self.description = description
        self.status = status
        self.is_public = is_public
        self.duration_seconds = duration_seconds
        self.thumbnail_url = thumbnail_url
        self.created_at = created_at or datetime.now(timezone.utc)

    def __repr__(self):
        return f"Video(video_id={self.video_id}, business_id={self.business_id}, status={self.status})"
