"""
Data Transfer Objects for the chunked upload API.
Defines request and response schemas for API endpoints.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class InitializeUploadRequest(BaseModel):
    """Request schema for opening a chunked upload session."""
    file_name: str = Field(..., min_length=1, max_length=255, description="Original file name")
    file_size: int = Field(..., gt=0, description="Total size of the file in bytes")
    mime_type: str = Field(..., description="Declared video content type")
    chunk_size: Optional[int] = Field(default=None, gt=0, description="Bytes per chunk")

    @field_validator('file_name')
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or v.strip() == "":
            raise ValueError("Field cannot be empty")
        return v.strip()


class InitializeUploadResponse(BaseModel):
    """Response schema for a newly opened upload session."""
    message: str = "Upload initialized successfully"
    upload_id: str
    total_chunks: int
    chunk_size: int
    expires_at: datetime


class ChunkUploadResponse(BaseModel):
    """Response schema for a stored (or already stored) chunk."""
    message: str
    chunk_index: int
    uploaded_count: int
    total_chunks: int
    progress: float
    is_complete: bool


class UploadStatusResponse(BaseModel):
    """Response schema for upload session status, used to resume uploads."""
    upload_id: str
    file_name: str
    total_size: int
    total_chunks: int
    uploaded_chunks: List[int]
    uploaded_count: int
    progress: float
    is_complete: bool
    expires_at: datetime


class CompleteUploadRequest(BaseModel):
    """Request schema for assembling an upload into its final file."""
    upload_id: str = Field(..., min_length=1)
    directory: str = Field(..., min_length=1, max_length=255, description="Destination directory")
    create_video: bool = False
    business_id: Optional[str] = None
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode='after')
    def require_business_for_video(self):
        if self.create_video and not self.business_id:
            raise ValueError("business_id is required when create_video is true")
        return self


class VideoSummary(BaseModel):
    """Short description of a video record created from an upload."""
    video_id: str
    status: str
    video_url: str


class CompleteUploadResponse(BaseModel):
    """Response schema for a successfully assembled upload."""
    message: str = "Upload completed successfully"
    file_name: str
    file_path: str
    file_url: str
    file_size: int
    mime_type: str
    video: Optional[VideoSummary] = None
    video_error: Optional[str] = None


class CancelUploadResponse(BaseModel):
    message: str = "Upload cancelled successfully"
