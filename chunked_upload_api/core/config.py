"""
Core configuration for the Chunked Upload API.
Manages environment variables, storage backends and upload limits.
"""
import os
from typing import List
from pydantic_settings import BaseSettings


DEFAULT_ALLOWED_MIME_TYPES = [
    "video/mp4",
    "video/mpeg",
    "video/quicktime",
    "video/x-msvideo",
    "video/webm",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # AWS Configuration
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    s3_bucket_name: str = os.getenv("S3_BUCKET_NAME", "")
    upload_sessions_table_name: str = os.getenv("UPLOAD_SESSIONS_TABLE_NAME", "")
    videos_table_name: str = os.getenv("VIDEOS_TABLE_NAME", "")

    # Storage backends
    session_backend: str = os.getenv("SESSION_BACKEND", "dynamodb")
    storage_backend: str = os.getenv("STORAGE_BACKEND", "s3")
    local_storage_root: str = os.getenv("LOCAL_STORAGE_ROOT", "./storage")
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "")
    chunk_prefix: str = os.getenv("CHUNK_PREFIX", "chunks")

    # API Configuration
    api_title: str = os.getenv("API_TITLE", "Chunked Upload API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Upload Limits
    max_file_size_mb: int = int(os.getenv("MAX_FILE_SIZE_MB", "500"))
    default_chunk_size_bytes: int = int(os.getenv("DEFAULT_CHUNK_SIZE_BYTES", str(1536 * 1024)))
    max_chunk_payload_bytes: int = int(os.getenv("MAX_CHUNK_PAYLOAD_BYTES", str(2 * 1024 * 1024)))
    upload_session_ttl_hours: int = int(os.getenv("UPLOAD_SESSION_TTL_HOURS", "24"))
    allowed_mime_types: List[str] = DEFAULT_ALLOWED_MIME_TYPES
    enforce_exact_chunk_length: bool = os.getenv("ENFORCE_EXACT_CHUNK_LENGTH", "false").lower() == "true"
    assembly_spool_max_mb: int = int(os.getenv("ASSEMBLY_SPOOL_MAX_MB", "16"))

    # Authentication
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def jwt_secret(self) -> str:
        """Get JWT secret from the environment or Parameter Store."""
        from chunked_upload_api.core.parameter_store import resolve_secret
        # Fallback for local dev or if parameter doesn't exist
        return resolve_secret(
            "JWT_SECRET",
            f"/chunked-upload-api/{self.environment}/jwt-secret",
            self.aws_region,
            fallback="dev-secret-change-in-production",
        )

    # Environment
    environment: str = os.getenv("ENVIRONMENT", "dev")

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
