"""Async job bodies shared by the Celery tasks and the in-process schedulers."""

from typing import Any

from vidcraft.domain.models import VideoFrame
from vidcraft.errors import ServiceError, user_message
from vidcraft.logging import get_logger
from vidcraft.services.generation import ContentGenerator
from vidcraft.services.transcription import TranscriptionJobManager

logger = get_logger(__name__)


async def run_transcription_job(video_id: str) -> dict[str, Any]:
    """Transcribe one video and persist the outcome on its record."""
    status = await TranscriptionJobManager().run(video_id)
    return {"video_id": video_id, "status": str(status)}


async def run_thumbnail_job(agent_id: str, frames: list[dict[str, Any]]) -> dict[str, Any]:
    """Generate a thumbnail for a stored agent.

    Failures are already recorded on the agent (status ``error``), so they
    are reported in the result rather than raised.
    """
    try:
        result = await ContentGenerator().generate_for_agent(
            agent_id, None, [VideoFrame(**f) for f in frames]
        )
    except ServiceError as e:
        logger.warning("thumbnail_job_failed", agent_id=agent_id, error=e.message)
        return {"agent_id": agent_id, "success": False, "error": user_message(e)}
    except Exception as e:
        logger.exception("thumbnail_job_error", agent_id=agent_id)
        return {"agent_id": agent_id, "success": False, "error": user_message(e)}

    return {"agent_id": agent_id, "success": True, "image_url": result.image_url}
