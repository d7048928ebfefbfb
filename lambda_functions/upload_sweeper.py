"""
Lambda function that removes expired chunked upload sessions.
Triggered on a schedule (e.g. an hourly EventBridge rule).
"""
import json
import logging
from chunked_upload_api.core import config
from chunked_upload_api.core.dependencies import get_session_service
from chunked_upload_api.core.exceptions import DynamoDBException, StorageException
from chunked_upload_api.core.logging_config import setup_logging

setup_logging(config.settings.log_level)
logger = logging.getLogger(__name__)


def handler(event, context):
    """
    Lambda handler for the expired upload sweep.

    Args:
        event: Scheduled event (contents unused)
        context: Lambda context object

    Returns:
        dict: Sweep result with status and count
    """
    try:
        cleaned = get_session_service().sweep_expired()

        return {
            'statusCode': 200,
            'body': json.dumps({
                'message': f'Removed {cleaned} expired upload sessions',
                'sessions_cleaned': cleaned
            })
        }

    except DynamoDBException as e:
        logger.error("Database error during sweep: %s", e.message)
        return {
            'statusCode': 500,
            'body': json.dumps({
                'error': 'Database Error',
                'message': e.message
            })
        }

    except StorageException as e:
        logger.error("Storage error during sweep: %s", e.message)
        return {
            'statusCode': 500,
            'body': json.dumps({
                'error': 'Storage Error',
                'message': e.message
            })
        }
