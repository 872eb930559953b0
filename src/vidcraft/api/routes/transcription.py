"""Transcription job endpoints."""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from vidcraft.api.deps import TranscriptionManagerDep, UserIdDep
from vidcraft.domain.enums import TranscriptionStatus

router = APIRouter(prefix="/videos/{video_id}/transcription", tags=["Transcription"])


class ScheduleResponse(BaseModel):
    scheduled: bool


class TranscriptionResponse(BaseModel):
    """Current transcription state of a video."""

    video_id: str
    status: TranscriptionStatus
    transcription: str | None
    error: str | None


@router.post(
    "",
    response_model=ScheduleResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start transcription",
    description="Mark the video as processing and enqueue the transcription job.",
)
async def schedule_transcription(
    video_id: str, user_id: UserIdDep, manager: TranscriptionManagerDep
) -> ScheduleResponse:
    result = await manager.schedule(video_id, user_id)
    return ScheduleResponse(**result)


@router.get(
    "",
    response_model=TranscriptionResponse,
    summary="Get transcription",
    description="Status, text and error of the video's transcription.",
)
async def get_transcription(
    video_id: str, user_id: UserIdDep, manager: TranscriptionManagerDep
) -> TranscriptionResponse:
    return TranscriptionResponse(**manager.status(video_id, user_id))


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear transcription",
    description="Drop the transcription and return the video to idle.",
)
async def clear_transcription(
    video_id: str, user_id: UserIdDep, manager: TranscriptionManagerDep
) -> Response:
    manager.clear(video_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
