"""
DynamoDB Repository for upload session metadata.
Received chunks are kept in a number set so concurrent chunk stores
update it with an atomic ADD instead of read-modify-write.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
import threading
import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError
from chunked_upload_api.core import config
from chunked_upload_api.core.exceptions import DynamoDBException
from chunked_upload_api.models.upload_session import UploadSession
from chunked_upload_api.repositories.session_repository import SessionRepository


class DynamoSessionRepository(SessionRepository):
    """Repository for upload session DynamoDB operations."""

    def __init__(self, table_name: Optional[str] = None):
        self.table_name = table_name or config.settings.upload_sessions_table_name
        self._local = threading.local()

    @property
    def table(self):
        """Table handle for the calling thread; boto3 resources are not thread-safe."""
        table = getattr(self._local, 'table', None)
        if table is None:
            dynamodb = boto3.session.Session().resource('dynamodb', region_name=config.settings.aws_region)
            table = self._local.table = dynamodb.Table(self.table_name)
        return table

    def create(self, session: UploadSession) -> None:
        """
        Create new upload session record.

        Args:
            session: UploadSession domain model

        Raises:
            DynamoDBException: If the record exists or the write fails
        """
        try:
            self.table.put_item(
                Item=self._session_to_item(session),
                ConditionExpression='attribute_not_exists(upload_id)'
            )
        except ClientError as e:
            raise DynamoDBException(f"Failed to create upload session: {str(e)}") from e

    def get_by_id(self, upload_id: str) -> Optional[UploadSession]:
        """
        Retrieve upload session by ID.

        Returns:
            UploadSession object or None if not found

        Raises:
            DynamoDBException: If query fails
        """
        try:
            response = self.table.get_item(Key={'upload_id': upload_id}, ConsistentRead=True)
        except ClientError as e:
            raise DynamoDBException(f"Failed to get upload session: {str(e)}") from e

        if 'Item' not in response:
            return None
        return self._item_to_session(response['Item'])

    def add_received_chunk(self, upload_id: str, chunk_index: int) -> Optional[Tuple[bool, UploadSession]]:
        """
        Atomically add a chunk index to the received set.

        The pre-update image tells whether this call was the first to record the
        index; the post-update set is derived from it.
        """
        try:
            response = self.table.update_item(
                Key={'upload_id': upload_id},
                UpdateExpression='ADD received_chunks :chunk',
                ConditionExpression='attribute_exists(upload_id)',
                ExpressionAttributeValues={':chunk': {chunk_index}},
                ReturnValues='ALL_OLD'
            )
        except ClientError as e:
            if self._is_conditional_failure(e):
                return None
            raise DynamoDBException(f"Failed to record chunk {chunk_index}: {str(e)}") from e

        session = self._item_to_session(response['Attributes'])
        added = chunk_index not in session.received_chunks
        session.received_chunks.add(chunk_index)
        return added, session

    def claim_for_assembly(self, upload_id: str) -> bool:
        try:
            self.table.update_item(
                Key={'upload_id': upload_id},
                UpdateExpression='SET #status = :assembling',
                ConditionExpression='attribute_exists(upload_id) AND #status = :open',
                ExpressionAttributeNames={'#status': 'status'},
                ExpressionAttributeValues={
                    ':assembling': UploadSession.STATUS_ASSEMBLING,
                    ':open': UploadSession.STATUS_OPEN
                }
            )
            return True
        except ClientError as e:
            if self._is_conditional_failure(e):
                return False
            raise DynamoDBException(f"Failed to claim upload session: {str(e)}") from e

    def release_claim(self, upload_id: str) -> None:
        try:
            self.table.update_item(
                Key={'upload_id': upload_id},
                UpdateExpression='SET #status = :open',
                ConditionExpression='attribute_exists(upload_id)',
                ExpressionAttributeNames={'#status': 'status'},
                ExpressionAttributeValues={':open': UploadSession.STATUS_OPEN}
            )
        except ClientError as e:
            if self._is_conditional_failure(e):
                return
            raise DynamoDBException(f"Failed to release upload session: {str(e)}") from e

    def delete(self, upload_id: str) -> Optional[UploadSession]:
        try:
            response = self.table.delete_item(
                Key={'upload_id': upload_id},
                ReturnValues='ALL_OLD'
            )
        except ClientError as e:
            raise DynamoDBException(f"Failed to delete upload session: {str(e)}") from e
        if 'Attributes' not in response:
            return None
        return self._item_to_session(response['Attributes'])

    def list_expired(self, now: datetime) -> List[str]:
        """Scan for sessions past their expiry, following pagination."""
        scan_kwargs = {
            'FilterExpression': Attr('expires_at_epoch').lt(self._epoch(now)),
            'ProjectionExpression': 'upload_id'
        }
        upload_ids = []
        try:
            while True:
                response = self.table.scan(**scan_kwargs)
                upload_ids.extend(item['upload_id'] for item in response.get('Items', []))
                if 'LastEvaluatedKey' not in response:
                    break
                scan_kwargs['ExclusiveStartKey'] = response['LastEvaluatedKey']
        except ClientError as e:
            raise DynamoDBException(f"Failed to scan expired sessions: {str(e)}") from e
        return upload_ids

    def _epoch(self, moment: datetime) -> Decimal:
        """Sub-second epoch, so the scan agrees with UploadSession.is_expired."""
        return Decimal(str(moment.timestamp()))

    def _is_conditional_failure(self, error: ClientError) -> bool:
        return error.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException'

    def _session_to_item(self, session: UploadSession) -> dict:
        item = {
            'upload_id': session.upload_id,
            'file_name': session.file_name,
            'total_size': session.total_size,
            'chunk_size': session.chunk_size,
            'total_chunks': session.total_chunks,
            'mime_type': session.mime_type,
            'status': session.status,
            'storage_prefix': session.storage_prefix,
            'created_at': session.created_at.isoformat(),
            'expires_at': session.expires_at.isoformat(),
            # Sweep filter only. Table TTL must stay off: it would drop metadata and orphan chunks
            'expires_at_epoch': self._epoch(session.expires_at)
        }
        # DynamoDB rejects empty sets
        if session.received_chunks:
            item['received_chunks'] = set(session.received_chunks)
        return item

    def _item_to_session(self, item: dict) -> UploadSession:
        """Convert DynamoDB item to UploadSession domain model."""
        return UploadSession(
            upload_id=item['upload_id'],
            file_name=item['file_name'],
            total_size=int(item['total_size']),
            chunk_size=int(item['chunk_size']),
            total_chunks=int(item['total_chunks']),
            mime_type=item['mime_type'],
            created_at=datetime.fromisoformat(item['created_at']),
            expires_at=datetime.fromisoformat(item['expires_at']),
            storage_prefix=item['storage_prefix'],
            received_chunks={int(i) for i in item.get('received_chunks', set())},
            status=item.get('status', UploadSession.STATUS_OPEN)
        )
