"""Stateless content generation endpoints."""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from vidcraft.api.deps import ContentGeneratorDep, UserIdDep
from vidcraft.domain.models import GenerationResult
from vidcraft.logging import get_logger
from vidcraft.services.generation import GenerationBatch, request_from_payload

router = APIRouter(prefix="/generate", tags=["Generation"])
logger = get_logger(__name__)


class ResolutionBody(BaseModel):
    width: int
    height: int


class ManualTranscriptionBody(BaseModel):
    file_name: str
    text: str
    format: str = "txt"


class VideoDataBody(BaseModel):
    title: str | None = None
    transcription: str | None = None
    manual_transcriptions: list[ManualTranscriptionBody] = Field(default_factory=list)
    duration: float | None = None
    resolution: ResolutionBody | None = None
    format: str | None = None


class ConnectedOutputBody(BaseModel):
    type: str
    content: str


class MoodBoardReferenceBody(BaseModel):
    url: str
    type: str = "link"
    title: str | None = None


class ProfileBody(BaseModel):
    channel_name: str = ""
    content_type: str = ""
    niche: str = ""
    tone: str | None = None
    target_audience: str | None = None


class VideoFrameBody(BaseModel):
    data_url: str
    timestamp: float = 0.0


class GenerateRequest(BaseModel):
    """Everything a generation call needs, supplied by the caller."""

    agent_type: str
    video_data: VideoDataBody = Field(default_factory=VideoDataBody)
    connected_outputs: list[ConnectedOutputBody] = Field(default_factory=list)
    mood_board_references: list[MoodBoardReferenceBody] = Field(default_factory=list)
    profile: ProfileBody | None = None
    video_frames: list[VideoFrameBody] = Field(default_factory=list)
    additional_context: str | None = None


class GenerateResponse(BaseModel):
    content: str
    prompt: str
    image_url: str | None = None
    concept: str | None = None
    model: str | None = None


class BatchGenerateRequest(BaseModel):
    requests: list[GenerateRequest] = Field(..., min_length=1)


class BatchItemResponse(BaseModel):
    type: str
    result: GenerateResponse
    error: str | None = None


class BatchGenerateResponse(BaseModel):
    batch: dict[str, Any]
    results: list[BatchItemResponse]


def result_to_response(result: GenerationResult) -> GenerateResponse:
    return GenerateResponse(
        content=result.content,
        prompt=result.prompt,
        image_url=result.image_url,
        concept=result.concept,
        model=result.model,
    )


@router.post(
    "",
    response_model=GenerateResponse,
    summary="Generate content",
    description="Validate the inputs and generate one piece of content. Nothing is persisted "
    "except thumbnail images.",
)
async def generate(
    request: GenerateRequest, user_id: UserIdDep, generator: ContentGeneratorDep
) -> GenerateResponse:
    logger.info("generate_requested", user_id=user_id, agent_type=request.agent_type)
    result = await generator.generate_content(request_from_payload(request.model_dump()))
    return result_to_response(result)


@router.post(
    "/batch",
    response_model=BatchGenerateResponse,
    summary="Generate content in batch",
    description="Generate several pieces concurrently. Failures are reported per item.",
)
async def generate_batch(
    request: BatchGenerateRequest, user_id: UserIdDep, generator: ContentGeneratorDep
) -> BatchGenerateResponse:
    batch = GenerationBatch()
    logger.info("batch_generate_requested", user_id=user_id, batch_id=batch.id)
    items = await generator.generate_multiple_content(
        [request_from_payload(r.model_dump()) for r in request.requests], batch
    )
    return BatchGenerateResponse(
        batch=batch.to_dict(),
        results=[
            BatchItemResponse(
                type=item.type,
                result=result_to_response(item.result),
                error=item.error,
            )
            for item in items
        ],
    )
