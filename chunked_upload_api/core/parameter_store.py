"""
AWS Systems Manager Parameter Store helper.
Resolves secrets from the environment first, then Parameter Store.
"""
import logging
import os
from functools import lru_cache
from typing import Optional
import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=10)
def get_parameter(parameter_name: str, region: str = "us-east-1") -> str:
    """
    Fetch a SecureString parameter, cached per process.

    Args:
        parameter_name: Full parameter name (e.g., /chunked-upload-api/dev/jwt-secret)
        region: AWS region

    Returns:
        Decrypted parameter value
    """
    ssm = boto3.client('ssm', region_name=region)
    response = ssm.get_parameter(Name=parameter_name, WithDecryption=True)
    return response['Parameter']['Value']


def resolve_secret(env_var: str, parameter_name: str, region: str, fallback: Optional[str] = None) -> str:
    """
    Resolve a secret value.

    Lookup order is the ``env_var`` environment variable, then Parameter Store,
    then ``fallback``. Raises the Parameter Store error when no fallback is given.
    """
    explicit = os.getenv(env_var)
    if explicit:
        return explicit

    try:
        return get_parameter(parameter_name, region)
    except (BotoCoreError, ClientError) as e:
        if fallback is None:
            raise
        logger.warning("Parameter %s unavailable, using fallback: %s", parameter_name, e)
        return fallback
