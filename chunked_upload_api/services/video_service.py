"""
Video Service.
Creates video records for assembled uploads and runs optional media processing.
"""
import logging
from typing import Optional
from chunked_upload_api.models.assembled_file import AssembledFile
from chunked_upload_api.models.video import Video
from chunked_upload_api.repositories.video_repository import VideoRepository
from chunked_upload_api.services.media_processor import MediaProcessor

logger = logging.getLogger(__name__)


class VideoService:
    """Service publishing videos that point at assembled uploads."""

    def __init__(self, video_repository: VideoRepository, media_processor: Optional[MediaProcessor] = None):
        self.video_repository = video_repository
        self.media_processor = media_processor

    def create_from_upload(
        self,
        assembled: AssembledFile,
        business_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None
    ) -> Video:
        """
        Publish a video record for an assembled file.

        Media processing failures never undo the publish; the video simply stays
        without duration and thumbnail.

        Raises:
            DynamoDBException: If the record cannot be saved
        """
        video = Video(
            business_id=business_id,
            video_url=assembled.file_url,
            title=title,
            description=description
        )
        self.video_repository.save(video)
        logger.info("Published video %s for business %s", video.video_id, business_id)

        if self.media_processor is not None:
            self._apply_media_metadata(video, assembled)

        return video

    def _apply_media_metadata(self, video: Video, assembled: AssembledFile) -> None:
        try:
            metadata = self.media_processor.process(assembled.file_url, assembled.mime_type)
            if metadata is None:
                return
            video.duration_seconds = metadata.duration_seconds
            video.thumbnail_url = metadata.thumbnail_url
            self.video_repository.save(video)
        except Exception:
            logger.exception("Media processing failed for video %s, publishing without it", video.video_id)
