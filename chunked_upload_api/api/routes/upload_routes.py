"""
Chunked upload API routes.
Handles HTTP endpoints for opening, feeding, completing and cancelling uploads.
"""
import logging
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from chunked_upload_api.core import config
from chunked_upload_api.core.auth_dependencies import verify_token
from chunked_upload_api.core.dependencies import (
    get_assembly_service,
    get_chunk_service,
    get_session_service,
    get_video_service
)
from chunked_upload_api.core.exceptions import DynamoDBException
from chunked_upload_api.models.dto.upload_dto import (
    CancelUploadResponse,
    ChunkUploadResponse,
    CompleteUploadRequest,
    CompleteUploadResponse,
    InitializeUploadRequest,
    InitializeUploadResponse,
    UploadStatusResponse,
    VideoSummary
)
from chunked_upload_api.services.assembly_service import AssemblyService
from chunked_upload_api.services.chunk_service import ChunkService
from chunked_upload_api.services.session_service import SessionService
from chunked_upload_api.services.video_service import VideoService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/api/uploads/chunked", tags=["Chunked Uploads"])


@router.post("/init", response_model=InitializeUploadResponse, status_code=status.HTTP_201_CREATED)
def initialize_upload(
    request: InitializeUploadRequest,
    session_service: SessionService = Depends(get_session_service),
    username: str = Depends(verify_token)
):
    """
    Open a chunked upload session.

    - **file_name**: Original file name (used for the extension)
    - **file_size**: Total bytes the client will send
    - **mime_type**: Video content type
    - **chunk_size**: Optional bytes per chunk
    """
    return session_service.initialize(
        request.file_name,
        request.file_size,
        request.mime_type,
        request.chunk_size
    )


@router.post("/chunk", response_model=ChunkUploadResponse)
async def upload_chunk(
    upload_id: str = Form(...),
    chunk_index: int = Form(...),
    chunk: UploadFile = File(..., description="Raw chunk bytes"),
    chunk_service: ChunkService = Depends(get_chunk_service),
    username: str = Depends(verify_token)
):
    """
    Upload a single chunk. Chunks may arrive in any order and may be retried.
    """
    max_bytes = config.settings.max_chunk_payload_bytes
    # Read one byte past the limit so oversized bodies are detected without buffering them
    payload = await chunk.read(max_bytes + 1)
    if len(payload) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Chunk exceeds maximum allowed size of {max_bytes} bytes"
        )

    return await run_in_threadpool(chunk_service.store_chunk, upload_id, chunk_index, payload)


@router.get("/{upload_id}", response_model=UploadStatusResponse)
def get_upload_status(
    upload_id: str,
    session_service: SessionService = Depends(get_session_service),
    username: str = Depends(verify_token)
):
    """
    Get upload status, including which chunks have arrived (for resuming).
    """
    return session_service.get_status(upload_id)


@router.post("/complete", response_model=CompleteUploadResponse, status_code=status.HTTP_201_CREATED)
def complete_upload(
    request: CompleteUploadRequest,
    assembly_service: AssemblyService = Depends(get_assembly_service),
    video_service: VideoService = Depends(get_video_service),
    username: str = Depends(verify_token)
):
    """
    Assemble all chunks into the final file, optionally publishing a video record.
    """
    assembled = assembly_service.complete(request.upload_id, request.directory)

    response = CompleteUploadResponse(
        file_name=assembled.file_name,
        file_path=assembled.file_path,
        file_url=assembled.file_url,
        file_size=assembled.file_size,
        mime_type=assembled.mime_type
    )

    if request.create_video:
        try:
            video = video_service.create_from_upload(
                assembled,
                business_id=request.business_id,
                title=request.title,
                description=request.description
            )
            response.video = VideoSummary(
                video_id=video.video_id,
                status=video.status,
                video_url=video.video_url
            )
        except DynamoDBException as e:
            # The file is already assembled; report it so the client can retry the record
            logger.error("Video record creation failed for %s: %s", assembled.file_path, e.message)
            response.video_error = e.message

    return response


@router.delete("/{upload_id}", response_model=CancelUploadResponse)
def cancel_upload(
    upload_id: str,
    session_service: SessionService = Depends(get_session_service),
    username: str = Depends(verify_token)
):
    """
    Cancel an upload and discard its chunks. Cancelling twice is not an error.
    """
    session_service.cancel(upload_id)
    return CancelUploadResponse()
