"""Celery task definitions."""

from typing import Any

from vidcraft.jobs.runners import run_thumbnail_job, run_transcription_job
from vidcraft.logging import bind_context, clear_context, get_logger
from vidcraft.utils import run_async
from vidcraft.worker import celery_app

logger = get_logger(__name__)


@celery_app.task(bind=True, name="transcription.run")
def transcribe_video_task(self: Any, video_id: str) -> dict[str, Any]:
    """Transcribe a video in the background.

    No automatic retries: a failed run leaves the video ``failed`` with a
    readable error and the user decides whether to try again.
    """
    bind_context(task_id=self.request.id, video_id=video_id)
    try:
        logger.info("transcription_task_started")
        result = run_async(run_transcription_job(video_id))
        logger.info("transcription_task_finished", status=result["status"])
        return result
    finally:
        clear_context()


@celery_app.task(bind=True, name="thumbnail.generate")
def generate_thumbnail_task(
    self: Any, agent_id: str, frames: list[dict[str, Any]]
) -> dict[str, Any]:
    """Generate a thumbnail from sampled video frames."""
    bind_context(task_id=self.request.id, agent_id=agent_id)
    try:
        logger.info("thumbnail_task_started", frames=len(frames))
        result = run_async(run_thumbnail_job(agent_id, frames))
        logger.info("thumbnail_task_finished", success=result["success"])
        return result
    finally:
        clear_context()
