"""AI content generation orchestrator.

Turns a GenerationRequest into a draft for one agent type. Text types are a
single LLM call; thumbnails are two-stage (vision model describes a concept
from video frames, image model renders it).
"""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import select

from vidcraft.adapters.image_gen import (
    THUMBNAIL_SIZE,
    ImageGenProvider,
    ImageGenRequest,
    get_image_gen_provider,
)
from vidcraft.adapters.llm import LLMProvider, VisionMessage, get_llm_provider
from vidcraft.config import settings
from vidcraft.db.models import AgentModel, ArticleModel
from vidcraft.db.session import get_session_context
from vidcraft.domain.enums import AgentStatus, AgentType, BatchStatus
from vidcraft.domain.models import (
    BatchItemResult,
    ConnectedOutput,
    GenerationRequest,
    GenerationResult,
    ManualTranscription,
    MoodBoardRef,
    ProfileData,
    Resolution,
    ValidationResult,
    VideoData,
    VideoFrame,
)
from vidcraft.errors import (
    GenerationError,
    NotFoundError,
    ServiceError,
    ValidationError,
    categorize_error,
    error_tracker,
    user_message,
)
from vidcraft.logging import get_logger
from vidcraft.services.agents import AgentService
from vidcraft.services.profiles import ProfileService
from vidcraft.services.projects import ProjectService
from vidcraft.services.prompts import (
    GENERATION_PARAMS,
    VISION_PARAMS,
    PromptBuilder,
    clean_content,
)
from vidcraft.services.scheduler import JobScheduler, get_job_scheduler
from vidcraft.services.storage import StorageService

logger = get_logger(__name__)

MAX_IMAGE_PROMPT_CHARS = 4000
ARTICLE_PREVIEW_CHARS = 2000
BLOG_FIELDS = ("title", "content", "metaDescription", "keywords", "links")

VISION_SYSTEM_PROMPT = (
    "You are an expert YouTube thumbnail designer and video analyst. Study the provided "
    "video frames and the video context, then describe one thumbnail concept: the main "
    "subject and composition, a short text overlay (3-5 words), the color scheme, and "
    "the emotional tone. Be specific enough that an illustrator could draw it."
)


def _is_valid_agent_type(value: Any) -> bool:
    try:
        AgentType(value)
    except ValueError:
        return False
    return True


def validate_inputs(request: GenerationRequest) -> ValidationResult:
    """Check a request before any external call is made."""
    errors: list[str] = []

    if not _is_valid_agent_type(request.agent_type):
        errors.append(f"Invalid agent type: {request.agent_type}")

    video = request.video_data
    if not video.title and not video.transcription and not video.manual_transcriptions:
        errors.append(
            "At least a title, transcription, or manual transcription is required "
            "for content generation"
        )

    if request.agent_type == AgentType.THUMBNAIL and not request.video_frames:
        errors.append("Video frames are required for thumbnail generation")

    profile = request.profile
    if profile is not None and not (
        profile.channel_name and profile.content_type and profile.niche
    ):
        errors.append("Profile must include channel name, content type, and niche")

    return ValidationResult(is_valid=not errors, errors=errors)


def parse_blog_post(raw: str) -> dict[str, Any]:
    """Parse and check the JSON blog post returned by the model.

    Raises:
        GenerationError: If the JSON is malformed or missing fields
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise GenerationError(
            "AI returned invalid data format or incomplete data.",
            details=raw[:500],
        ) from e

    if (
        not isinstance(parsed, dict)
        or not parsed.get("title")
        or not parsed.get("content")
        or not parsed.get("metaDescription")
        or not isinstance(parsed.get("keywords"), list)
        or not isinstance(parsed.get("links"), list)
    ):
        raise GenerationError(
            "AI returned incomplete JSON data. Missing one or more required fields: "
            "title, content, metaDescription, keywords, links."
        )
    return {key: parsed[key] for key in BLOG_FIELDS}


def build_image_prompt(concept: str, profile: ProfileData | None) -> str:
    prompt = (
        f"Create a YouTube thumbnail image: {concept.strip()}\n\n"
        "Style requirements:\n"
        "- 16:9 aspect ratio\n"
        "- High contrast, vibrant colors\n"
        "- Bold, readable text overlay (3-5 words max)\n"
        "- One clear focal point\n"
        "- Readable at mobile size\n"
    )
    if profile and profile.tone:
        prompt += f"- Overall tone: {profile.tone}\n"
    return prompt[:MAX_IMAGE_PROMPT_CHARS]


@dataclass
class GenerationBatch:
    """Tracks one batch generation; cancelling stops items not yet started."""

    id: str = field(default_factory=lambda: uuid4().hex)
    total: int = 0
    completed: int = 0
    failed: int = 0
    status: BatchStatus = BatchStatus.PENDING

    @property
    def cancelled(self) -> bool:
        return self.status is BatchStatus.CANCELLED

    def cancel(self) -> None:
        if self.status in (BatchStatus.PENDING, BatchStatus.RUNNING):
            self.status = BatchStatus.CANCELLED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "total": self.total,
            "completed": self.completed,
            "failed": self.failed,
            "status": str(self.status),
        }


class ContentGenerator:
    """Generates agent drafts through the configured providers."""

    def __init__(
        self,
        llm: LLMProvider | None = None,
        image_gen: ImageGenProvider | None = None,
        storage: StorageService | None = None,
        scheduler: JobScheduler | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self.llm = llm or get_llm_provider()
        self.image_gen = image_gen or get_image_gen_provider()
        self.storage = storage or StorageService()
        self.scheduler = scheduler or get_job_scheduler()
        self.max_concurrency = max_concurrency or settings.generation_max_concurrency

    validate_inputs = staticmethod(validate_inputs)

    def _check(self, request: GenerationRequest) -> AgentType:
        validation = validate_inputs(request)
        if not validation.is_valid:
            raise ValidationError("; ".join(validation.errors), errors=validation.errors)
        return AgentType(request.agent_type)

    async def generate_content(self, request: GenerationRequest) -> GenerationResult:
        """Generate a draft for a text agent type (thumbnails are delegated).

        Raises:
            ValidationError: If the request fails validation
            GenerationError: If the model output is unusable
            ServiceError: For provider failures, categorized
        """
        agent_type = self._check(request)
        if agent_type is AgentType.THUMBNAIL:
            return await self.generate_thumbnail(request)

        params = GENERATION_PARAMS[agent_type]
        prompt = PromptBuilder.user_prompt(request)

        logger.info(
            "generation_started",
            agent_type=str(agent_type),
            provider=self.llm.name,
            prompt_chars=len(prompt),
        )
        try:
            response = await self.llm.ask(
                PromptBuilder.system_prompt(agent_type),
                prompt,
                temperature=params.temperature,
                max_tokens=params.max_tokens,
                json_mode=params.json_mode,
            )
        except ServiceError:
            raise
        except Exception as e:
            raise categorize_error(e, context=f"generate_{agent_type}") from e

        if agent_type is AgentType.BLOG:
            content = json.dumps(parse_blog_post(response.content))
        else:
            content = clean_content(agent_type, response.content)
        if not content:
            raise GenerationError("AI returned empty content")
        if response.truncated:
            logger.warning("generation_truncated", agent_type=str(agent_type))

        logger.info(
            "generation_completed",
            agent_type=str(agent_type),
            model=response.model,
            content_chars=len(content),
            tokens=response.total_tokens,
        )
        return GenerationResult(content=content, prompt=prompt, model=response.model)

    async def _thumbnail_concept(self, request: GenerationRequest, prompt: str) -> str:
        if self.llm.supports_vision:
            messages = [
                VisionMessage(role="system", text=VISION_SYSTEM_PROMPT),
                VisionMessage(
                    role="user",
                    text=prompt,
                    image_urls=[frame.data_url for frame in request.video_frames],
                    image_detail="low",
                ),
            ]
            response = await self.llm.complete_with_vision(
                messages,
                temperature=VISION_PARAMS.temperature,
                max_tokens=VISION_PARAMS.max_tokens,
            )
        else:
            params = GENERATION_PARAMS[AgentType.THUMBNAIL]
            response = await self.llm.ask(
                PromptBuilder.system_prompt(AgentType.THUMBNAIL),
                prompt,
                temperature=params.temperature,
                max_tokens=params.max_tokens,
            )
        return clean_content(AgentType.THUMBNAIL, response.content)

    async def generate_thumbnail(self, request: GenerationRequest) -> GenerationResult:
        """Analyse frames into a concept, then render it as a 1792x1024 image."""
        self._check(request)
        prompt = PromptBuilder.user_prompt(request)
        log = logger.bind(frames=len(request.video_frames), provider=self.image_gen.name)

        try:
            concept = await self._thumbnail_concept(request, prompt)
        except ServiceError:
            raise
        except Exception as e:
            raise categorize_error(e, context="thumbnail_concept") from e
        if not concept:
            raise GenerationError("Failed to generate thumbnail concept")
        log.info("thumbnail_concept_generated", concept_chars=len(concept))

        image_prompt = build_image_prompt(concept, request.profile)
        try:
            result = await self.image_gen.generate(
                ImageGenRequest(prompt=image_prompt, size=THUMBNAIL_SIZE)
            )
        except ServiceError:
            raise
        except Exception as e:
            raise categorize_error(e, context="thumbnail_image") from e
        if not result.success or not result.has_image:
            raise GenerationError(result.error_message or "Image generation returned no image")

        if result.image_data:
            asset = self.storage.store_bytes(
                result.image_data,
                mime_type=result.content_type,
                kind="thumbnail",
                metadata={"size": THUMBNAIL_SIZE},
            )
            image_url = self.storage.get_url(asset.id)
        else:
            image_url = result.image_url

        log.info("thumbnail_generated", image_url=image_url)
        return GenerationResult(
            content=concept,
            prompt=image_prompt,
            image_url=image_url,
            concept=concept,
        )

    async def generate_multiple_content(
        self,
        requests: list[GenerationRequest],
        batch: GenerationBatch | None = None,
    ) -> list[BatchItemResult]:
        """Generate several drafts concurrently.

        Each item succeeds or fails on its own. Cancelling ``batch`` skips
        items that have not started; running calls finish.
        """
        batch = batch or GenerationBatch()
        batch.total = len(requests)
        if not batch.cancelled:
            batch.status = BatchStatus.RUNNING
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run_one(request: GenerationRequest) -> BatchItemResult:
            item_type = str(request.agent_type)
            async with semaphore:
                if batch.cancelled:
                    return BatchItemResult(
                        type=item_type,
                        result=GenerationResult(content="", prompt=""),
                        error="Cancelled",
                    )
                try:
                    result = await self.generate_content(request)
                except Exception as e:
                    batch.failed += 1
                    error_tracker.record(e, context="batch_generation")
                    return BatchItemResult(
                        type=item_type,
                        result=GenerationResult(content="", prompt=""),
                        error=user_message(e),
                    )
                batch.completed += 1
                return BatchItemResult(type=item_type, result=result)

        results = await asyncio.gather(*(run_one(r) for r in requests))
        if not batch.cancelled:
            batch.status = BatchStatus.COMPLETED

        logger.info("batch_generation_finished", **batch.to_dict())
        return list(results)

    def _request_for_agent(
        self,
        agent_id: str | UUID,
        user_id: str | None,
        frames: list[VideoFrame] | None,
        mood_board_references: list[MoodBoardRef] | None,
    ) -> tuple[UUID, UUID, GenerationRequest]:
        with get_session_context() as session:
            agents = AgentService(session)
            agent = agents.get(agent_id, user_id)
            video = agent.video

            # Connections name sibling agents or articles, possibly deleted since
            connected: list[ConnectedOutput] = []
            connection_ids = []
            for raw in agent.connections or []:
                try:
                    connection_ids.append(UUID(str(raw)))
                except ValueError:
                    continue
            if connection_ids:
                rows = session.execute(
                    select(AgentModel).where(
                        AgentModel.id.in_(connection_ids),
                        AgentModel.project_id == agent.project_id,
                    )
                ).scalars()
                connected = [
                    ConnectedOutput(type=row.type, content=row.draft)
                    for row in rows
                    if row.id != agent.id and row.draft
                ]
                articles = session.execute(
                    select(ArticleModel).where(
                        ArticleModel.id.in_(connection_ids),
                        ArticleModel.project_id == agent.project_id,
                    )
                ).scalars()
                connected.extend(
                    ConnectedOutput(
                        type="article",
                        content=f"{a.title}\n{a.content[:ARTICLE_PREVIEW_CHARS]}",
                    )
                    for a in articles
                )

            profile_row = ProfileService(session).get(agent.user_id)
            profile = ProfileService.to_profile_data(profile_row) if profile_row else None

            resolution = None
            if video.width and video.height:
                resolution = Resolution(width=video.width, height=video.height)
            request = GenerationRequest(
                agent_type=agent.type,
                video_data=VideoData(
                    title=video.title,
                    transcription=video.transcription,
                    duration=video.duration,
                    resolution=resolution,
                    format=video.format,
                ),
                connected_outputs=connected,
                mood_board_references=mood_board_references or [],
                profile=profile,
                video_frames=frames or [],
            )

            validation = validate_inputs(request)
            if not validation.is_valid:
                raise ValidationError("; ".join(validation.errors), errors=validation.errors)

            agents.set_status(agent, AgentStatus.GENERATING)
            return agent.id, agent.project_id, request

    async def generate_for_agent(
        self,
        agent_id: str | UUID,
        user_id: str | None = None,
        frames: list[VideoFrame] | None = None,
        mood_board_references: list[MoodBoardRef] | None = None,
    ) -> GenerationResult:
        """Generate and persist the draft of a stored agent.

        The agent is left ``ready`` with its new draft, or ``error`` with a
        readable message, in which case the error is re-raised.
        """
        agent_key, project_id, request = self._request_for_agent(
            agent_id, user_id, frames, mood_board_references
        )
        log = logger.bind(agent_id=str(agent_key), agent_type=str(request.agent_type))

        try:
            result = await self.generate_content(request)
        except Exception as e:
            message = user_message(e)
            log.error("agent_generation_failed", error=message)
            try:
                with get_session_context() as session:
                    agents = AgentService(session)
                    agents.set_status(agents.get(agent_key, None), AgentStatus.ERROR, message)
            except NotFoundError:
                log.warning("agent_deleted_during_generation")
            raise

        with get_session_context() as session:
            AgentService(session).update_draft(
                agent_key,
                None,
                result.content,
                status=AgentStatus.READY,
                thumbnail_url=result.image_url,
            )
            ProjectService(session).record_generation(project_id)

        log.info("agent_generation_completed", content_chars=len(result.content))
        return result

    async def schedule_thumbnail(
        self, agent_id: str | UUID, user_id: str, frames: list[VideoFrame]
    ) -> dict[str, Any]:
        """Mark a thumbnail agent generating and hand it to a background job."""
        if not frames:
            raise ValidationError("Video frames are required for thumbnail generation")

        with get_session_context() as session:
            agents = AgentService(session)
            agent = agents.get(agent_id, user_id)
            if agent.type != AgentType.THUMBNAIL:
                raise ValidationError("Agent is not a thumbnail agent")
            agents.set_status(agent, AgentStatus.GENERATING)
            agent_key = str(agent.id)

        await self.scheduler.schedule_thumbnail(
            agent_key,
            [{"data_url": f.data_url, "timestamp": f.timestamp} for f in frames],
        )
        logger.info("thumbnail_scheduled", agent_id=agent_key, frames=len(frames))
        return {"scheduled": True, "scheduled_at": datetime.now(UTC).isoformat()}


def request_from_payload(payload: dict[str, Any]) -> GenerationRequest:
    """Build a GenerationRequest from its JSON form (used by jobs and the CLI)."""
    video = payload.get("video_data") or {}
    resolution = video.get("resolution")
    profile = payload.get("profile")
    return GenerationRequest(
        agent_type=payload.get("agent_type", ""),
        video_data=VideoData(
            title=video.get("title"),
            transcription=video.get("transcription"),
            manual_transcriptions=[
                ManualTranscription(**t) for t in video.get("manual_transcriptions") or []
            ],
            duration=video.get("duration"),
            resolution=Resolution(**resolution) if resolution else None,
            format=video.get("format"),
        ),
        connected_outputs=[ConnectedOutput(**o) for o in payload.get("connected_outputs") or []],
        mood_board_references=[
            MoodBoardRef(**r) for r in payload.get("mood_board_references") or []
        ],
        profile=ProfileData(**profile) if profile else None,
        video_frames=[VideoFrame(**f) for f in payload.get("video_frames") or []],
        additional_context=payload.get("additional_context"),
    )
