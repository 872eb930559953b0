"""Video record endpoints."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from vidcraft.api.deps import StorageServiceDep, UserIdDep
from vidcraft.db.models import VideoModel
from vidcraft.db.session import get_session_context
from vidcraft.domain.enums import TranscriptionStatus
from vidcraft.domain.models import VideoMetadata
from vidcraft.errors import ValidationError
from vidcraft.logging import get_logger
from vidcraft.services.metadata import MetadataError, get_metadata_extractor
from vidcraft.services.videos import VideoService, metadata_of

router = APIRouter(tags=["Videos"])
logger = get_logger(__name__)


class CreateVideoRequest(BaseModel):
    """Request to create a video record for an uploaded file."""

    title: str = Field(..., min_length=1, max_length=255)
    storage_id: str | None = None
    video_url: str | None = None
    file_name: str | None = None
    file_size: int | None = Field(None, ge=0)
    mime_type: str | None = None
    canvas_x: float = 0.0
    canvas_y: float = 0.0
    metadata: dict[str, Any] | None = None


class UpdateVideoRequest(BaseModel):
    """Request to rename or move a video."""

    title: str | None = Field(None, min_length=1, max_length=255)
    canvas_x: float | None = None
    canvas_y: float | None = None


class VideoResponse(BaseModel):
    """Video response model."""

    id: str
    project_id: str
    title: str
    storage_id: str | None
    video_url: str | None
    file_name: str | None
    file_size: int | None
    mime_type: str | None
    canvas_x: float
    canvas_y: float
    metadata: dict[str, Any]
    transcription: str | None
    transcription_status: TranscriptionStatus
    transcription_error: str | None
    created_at: datetime
    updated_at: datetime | None


def _model_to_response(video: VideoModel) -> VideoResponse:
    """Convert a VideoModel to VideoResponse."""
    return VideoResponse(
        id=str(video.id),
        project_id=str(video.project_id),
        title=video.title,
        storage_id=video.storage_id,
        video_url=video.video_url,
        file_name=video.file_name,
        file_size=video.file_size,
        mime_type=video.mime_type,
        canvas_x=video.canvas_x,
        canvas_y=video.canvas_y,
        metadata=metadata_of(video).to_dict(),
        transcription=video.transcription,
        transcription_status=TranscriptionStatus(video.transcription_status),
        transcription_error=video.transcription_error,
        created_at=video.created_at,
        updated_at=video.updated_at,
    )


@router.post(
    "/projects/{project_id}/videos",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create video",
    description="Create a video record in a project. Transcription starts idle.",
)
async def create_video(
    project_id: str, request: CreateVideoRequest, user_id: UserIdDep
) -> VideoResponse:
    """Create a video record."""
    if not request.storage_id and not request.video_url:
        raise ValidationError("Either storage_id or video_url is required")

    metadata = VideoMetadata.from_dict(request.metadata) if request.metadata else None
    with get_session_context() as session:
        video = VideoService(session).create(
            user_id,
            project_id,
            request.title,
            storage_id=request.storage_id,
            video_url=request.video_url,
            file_name=request.file_name,
            file_size=request.file_size,
            mime_type=request.mime_type,
            canvas_x=request.canvas_x,
            canvas_y=request.canvas_y,
            metadata=metadata,
        )
        return _model_to_response(video)


@router.get(
    "/projects/{project_id}/videos",
    response_model=list[VideoResponse],
    summary="List videos",
    description="List the videos of a project, oldest first.",
)
async def list_videos(project_id: str, user_id: UserIdDep) -> list[VideoResponse]:
    with get_session_context() as session:
        videos = VideoService(session).list_for_project(project_id, user_id)
        return [_model_to_response(v) for v in videos]


@router.get(
    "/videos/{video_id}",
    response_model=VideoResponse,
    summary="Get video",
    description="Get a video with its metadata and transcription.",
)
async def get_video(video_id: str, user_id: UserIdDep) -> VideoResponse:
    with get_session_context() as session:
        return _model_to_response(VideoService(session).get(video_id, user_id))


@router.patch(
    "/videos/{video_id}",
    response_model=VideoResponse,
    summary="Update video",
)
async def update_video(
    video_id: str, request: UpdateVideoRequest, user_id: UserIdDep
) -> VideoResponse:
    with get_session_context() as session:
        video = VideoService(session).update(
            video_id,
            user_id,
            title=request.title,
            canvas_x=request.canvas_x,
            canvas_y=request.canvas_y,
        )
        return _model_to_response(video)


@router.put(
    "/videos/{video_id}/metadata",
    response_model=VideoResponse,
    summary="Update video metadata",
    description="Store technical metadata extracted by the client. Unset fields are kept.",
)
async def update_video_metadata(
    video_id: str, metadata: dict[str, Any], user_id: UserIdDep
) -> VideoResponse:
    with get_session_context() as session:
        video = VideoService(session).update_metadata(
            video_id, user_id, VideoMetadata.from_dict(metadata)
        )
        return _model_to_response(video)


@router.post(
    "/videos/{video_id}/metadata/extract",
    response_model=VideoResponse,
    summary="Extract video metadata",
    description="Run full metadata extraction on the stored file. Falls back to "
    "basic metadata when full extraction fails.",
)
async def extract_video_metadata(
    video_id: str, user_id: UserIdDep, storage: StorageServiceDep
) -> VideoResponse:
    """Extract and persist metadata for a stored video."""
    with get_session_context() as session:
        video = VideoService(session).get(video_id, user_id)
        if not video.storage_id:
            raise ValidationError("Video has no stored file")
        storage_id = video.storage_id

    path = storage.get_asset(storage_id).file_path
    extractor = get_metadata_extractor()
    try:
        metadata = await extractor.extract_full(path)
    except MetadataError as e:
        logger.warning("full_metadata_extraction_failed", video_id=video_id, error=e.message)
        metadata = await extractor.extract_basic(path)

    with get_session_context() as session:
        video = VideoService(session).update_metadata(video_id, user_id, metadata)
        return _model_to_response(video)


@router.delete(
    "/videos/{video_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete video",
    description="Delete a video and its agents.",
)
async def delete_video(video_id: str, user_id: UserIdDep) -> Response:
    with get_session_context() as session:
        VideoService(session).delete(video_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
