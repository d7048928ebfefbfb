"""
DynamoDB Repository for video records.
Creates and updates the records that point at assembled uploads.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
import threading
import boto3
from botocore.exceptions import ClientError
from chunked_upload_api.core import config
from chunked_upload_api.core.exceptions import DynamoDBException
from chunked_upload_api.models.video import Video


class VideoRepository:
    """Repository for video DynamoDB operations."""

    def __init__(self, table_name: Optional[str] = None):
        self.table_name = table_name or config.settings.videos_table_name
        self._local = threading.local()

    @property
    def table(self):
        """Table handle for the calling thread; boto3 resources are not thread-safe."""
        table = getattr(self._local, 'table', None)
        if table is None:
            dynamodb = boto3.session.Session().resource('dynamodb', region_name=config.settings.aws_region)
            table = self._local.table = dynamodb.Table(self.table_name)
        return table

    def save(self, video: Video) -> None:
        """
        Save video record to DynamoDB.

        Args:
            video: Video domain model

        Raises:
            DynamoDBException: If save operation fails
        """
        item = {
            'video_id': video.video_id,
            'business_id': video.business_id,
            'video_url': video.video_url,
            'status': video.status,
            'is_public': video.is_public,
            'created_at': video.created_at.isoformat()
        }
        optional = {
            'title': video.title,
            'description': video.description,
            'thumbnail_url': video.thumbnail_url,
            'duration_seconds': Decimal(str(video.duration_seconds)) if video.duration_seconds is not None else None
        }
        item.update({k: v for k, v in optional.items() if v is not None})

        try:
            self.table.put_item(Item=item)
        except ClientError as e:
            raise DynamoDBException(f"Failed to save video: {str(e)}") from e

    def get_by_id(self, video_id: str) -> Optional[Video]:
        try:
            response = self.table.get_item(Key={'video_id': video_id})
        except ClientError as e:
            raise DynamoDBException(f"Failed to get video: {str(e)}") from e

        if 'Item' not in response:
            return None
        return self._item_to_video(response['Item'])

    def _item_to_video(self, item: dict) -> Video:
        """Convert DynamoDB item to Video domain model."""
        duration = item.get('duration_seconds')
        return Video(
            video_id=item['video_id'],
            business_id=item['business_id'],
            video_url=item['video_url'],
            title=item.get('title'),
            description=item.get('description'),
            status=item['status'],
            is_public=bool(item.get('is_public', True)),
            duration_seconds=float(duration) if duration is not None else None,
            thumbnail_url=item.get('thumbnail_url'),
            created_at=datetime.fromisoformat(item['created_at'])
        )
