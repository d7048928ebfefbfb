"""
S3 Repository for file storage operations.
Stores chunk artifacts and assembled uploads in Amazon S3.
"""
from typing import BinaryIO, Optional
import boto3
from botocore.exceptions import ClientError
from chunked_upload_api.core import config
from chunked_upload_api.core.exceptions import StorageException
from chunked_upload_api.repositories.storage_repository import StorageRepository

# delete_objects accepts at most 1000 keys per request
DELETE_BATCH_SIZE = 1000


class S3Repository(StorageRepository):
    """Repository for S3 file operations."""

    def __init__(self, bucket_name: Optional[str] = None):
        self.s3_client = boto3.client('s3', region_name=config.settings.aws_region)
        self.bucket_name = bucket_name or config.settings.s3_bucket_name

    def put_object(self, key: str, data: bytes) -> None:
        try:
            self.s3_client.put_object(Bucket=self.bucket_name, Key=key, Body=data)
        except ClientError as e:
            raise StorageException(f"Failed to write object {key} to S3: {str(e)}") from e

    def get_object(self, key: str) -> bytes:
        """
        Retrieve object from S3.

        Raises:
            StorageException: If retrieval fails
        """
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
            return response['Body'].read()
        except ClientError as e:
            raise StorageException(f"Failed to retrieve object {key} from S3: {str(e)}") from e

    def upload_fileobj(self, file: BinaryIO, key: str, content_type: Optional[str] = None) -> None:
        """
        Upload a file-like object to S3.

        Args:
            file: File object positioned at its start
            key: Destination S3 key
            content_type: Content type stored with the object

        Raises:
            StorageException: If upload fails
        """
        extra_args = {'ContentType': content_type} if content_type else None
        try:
            self.s3_client.upload_fileobj(file, self.bucket_name, key, ExtraArgs=extra_args)
        except ClientError as e:
            raise StorageException(f"Failed to upload file to S3: {str(e)}") from e

    def get_object_size(self, key: str) -> Optional[int]:
        try:
            response = self.s3_client.head_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('404', 'NoSuchKey', 'NotFound'):
                return None
            raise StorageException(f"Failed to stat object {key} in S3: {str(e)}") from e
        return int(response['ContentLength'])

    def delete_object(self, key: str) -> None:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            raise StorageException(f"Failed to delete object {key} from S3: {str(e)}") from e

    def delete_prefix(self, prefix: str) -> int:
        """Delete all objects under a prefix in batches."""
        prefix = prefix.rstrip('/') + '/'
        deleted = 0
        try:
            paginator = self.s3_client.get_paginator('list_objects_v2')
            keys = []
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                keys.extend(obj['Key'] for obj in page.get('Contents', []))

            for start in range(0, len(keys), DELETE_BATCH_SIZE):
                batch = keys[start:start + DELETE_BATCH_SIZE]
                self.s3_client.delete_objects(
                    Bucket=self.bucket_name,
                    Delete={'Objects': [{'Key': key} for key in batch], 'Quiet': True}
                )
                deleted += len(batch)
        except ClientError as e:
            raise StorageException(f"Failed to delete objects under {prefix}: {str(e)}") from e
        return deleted

    def get_url(self, key: str) -> str:
        if config.settings.public_base_url:
            return f"{config.settings.public_base_url.rstrip('/')}/{key}"
        return f"https://{self.bucket_name}.s3.{config.settings.aws_region}.amazonaws.com/{key}"
