"""
Dependency injection container for FastAPI.
Provides singleton-like behavior for services and repositories, selecting
storage backends from settings.
"""
from functools import lru_cache
from chunked_upload_api.core import config
from chunked_upload_api.repositories.dynamo_session_repository import DynamoSessionRepository
from chunked_upload_api.repositories.local_storage_repository import LocalStorageRepository
from chunked_upload_api.repositories.memory_session_repository import InMemorySessionRepository
from chunked_upload_api.repositories.s3_repository import S3Repository
from chunked_upload_api.repositories.session_repository import SessionRepository
from chunked_upload_api.repositories.storage_repository import StorageRepository
from chunked_upload_api.repositories.video_repository import VideoRepository
from chunked_upload_api.services.assembly_service import AssemblyService
from chunked_upload_api.services.chunk_service import ChunkService
from chunked_upload_api.services.session_service import SessionService
from chunked_upload_api.services.video_service import VideoService


@lru_cache()
def get_session_repository() -> SessionRepository:
    """Get SessionRepository singleton for the configured backend."""
    backend = config.settings.session_backend.lower()
    if backend == "dynamodb":
        return DynamoSessionRepository()
    if backend == "memory":
        return InMemorySessionRepository()
    raise ValueError(f"Unknown session backend: {config.settings.session_backend}")


@lru_cache()
def get_storage_repository() -> StorageRepository:
    """Get StorageRepository singleton for the configured backend."""
    backend = config.settings.storage_backend.lower()
    if backend == "s3":
        return S3Repository()
    if backend == "local":
        return LocalStorageRepository()
    raise ValueError(f"Unknown storage backend: {config.settings.storage_backend}")


@lru_cache()
def get_video_repository() -> VideoRepository:
    """Get VideoRepository singleton instance."""
    return VideoRepository()


@lru_cache()
def get_session_service() -> SessionService:
    """Get SessionService singleton instance with injected dependencies."""
    return SessionService(
        session_repository=get_session_repository(),
        storage_repository=get_storage_repository()
    )


@lru_cache()
def get_chunk_service() -> ChunkService:
    """Get ChunkService singleton instance with injected dependencies."""
    return ChunkService(
        session_service=get_session_service(),
        session_repository=get_session_repository(),
        storage_repository=get_storage_repository()
    )


@lru_cache()
def get_assembly_service() -> AssemblyService:
    """Get AssemblyService singleton instance with injected dependencies."""
    return AssemblyService(
        session_service=get_session_service(),
        session_repository=get_session_repository(),
        storage_repository=get_storage_repository()
    )


@lru_cache()
def get_video_service() -> VideoService:
    """Get VideoService singleton instance."""
    return VideoService(video_repository=get_video_repository())


def clear_caches() -> None:
    """Drop cached singletons, e.g. after settings change."""
    for provider in (
        get_session_repository,
        get_storage_repository,
        get_video_repository,
        get_session_service,
        get_chunk_service,
        get_assembly_service,
        get_video_service,
    ):
        provider.cache_clear()
