"""
Shared test fixtures and utilities.
"""
import os

os.environ.setdefault("JWT_SECRET", "dev-secret-change-in-production")

import pytest
import jwt
import boto3
from datetime import datetime, timedelta, timezone
from moto import mock_aws
from chunked_upload_api.core import config
from chunked_upload_api.repositories.local_storage_repository import LocalStorageRepository
from chunked_upload_api.repositories.memory_session_repository import InMemorySessionRepository
from chunked_upload_api.services.assembly_service import AssemblyService
from chunked_upload_api.services.chunk_service import ChunkService
from chunked_upload_api.services.session_service import SessionService


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now=None):
        self.now = now or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def auth_headers():
    """Generate valid JWT token and return authorization headers."""
    jwt_secret = os.environ["JWT_SECRET"]
    jwt_algorithm = "HS256"

    now = datetime.now(timezone.utc)
    payload = {
        "sub": "test_user",
        "exp": now + timedelta(hours=1),
        "iat": now
    }

    token = jwt.encode(payload, jwt_secret, algorithm=jwt_algorithm)

    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials so boto3 never reaches real AWS."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_REGION", "us-east-1")


@pytest.fixture
def setup_test_env(aws_credentials, monkeypatch):
    monkeypatch.setenv("S3_BUCKET_NAME", "test-bucket")
    monkeypatch.setenv("UPLOAD_SESSIONS_TABLE_NAME", "UploadSessions-test")
    monkeypatch.setenv("VIDEOS_TABLE_NAME", "Videos-test")
    monkeypatch.setenv("ENVIRONMENT", "test")
    config.settings = config.Settings()
    yield
    monkeypatch.undo()
    config.settings = config.Settings()


def create_sessions_table(dynamodb):
    return dynamodb.create_table(
        TableName="UploadSessions-test",
        KeySchema=[{"AttributeName": "upload_id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "upload_id", "AttributeType": "S"}],
        BillingMode="PAY_PER_REQUEST"
    )


def create_videos_table(dynamodb):
    return dynamodb.create_table(
        TableName="Videos-test",
        KeySchema=[{"AttributeName": "video_id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "video_id", "AttributeType": "S"}],
        BillingMode="PAY_PER_REQUEST"
    )


@pytest.fixture
def aws_resources(setup_test_env):
    """Mocked bucket and tables used by the DynamoDB/S3 backends."""
    with mock_aws():
        s3 = boto3.client("s3", region_name="us-east-1")
        s3.create_bucket(Bucket="test-bucket")

        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")
        sessions_table = create_sessions_table(dynamodb)
        videos_table = create_videos_table(dynamodb)

        yield s3, sessions_table, videos_table


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def storage_root(tmp_path):
    return tmp_path / "storage"


@pytest.fixture
def session_repository():
    return InMemorySessionRepository()


@pytest.fixture
def storage_repository(storage_root):
    return LocalStorageRepository(root=str(storage_root))


@pytest.fixture
def session_service(session_repository, storage_repository, clock):
    return SessionService(session_repository, storage_repository, clock=clock)


@pytest.fixture
def chunk_service(session_service, session_repository, storage_repository):
    return ChunkService(session_service, session_repository, storage_repository)


@pytest.fixture
def assembly_service(session_service, session_repository, storage_repository):
    return AssemblyService(session_service, session_repository, storage_repository)
