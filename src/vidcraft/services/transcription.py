"""Transcription job manager.

Each video moves idle -> processing -> completed | failed. Scheduling flips
the status synchronously; the provider call happens in a background job.
"""

from typing import Any
from uuid import UUID

from vidcraft.adapters.transcription import (
    TranscriptionProvider,
    TranscriptionRequest,
    get_transcription_provider,
)
from vidcraft.db.session import get_session_context
from vidcraft.domain.enums import TranscriptionStatus
from vidcraft.errors import NotFoundError, TranscriptionError, error_tracker, user_message
from vidcraft.logging import get_logger
from vidcraft.services.scheduler import JobScheduler, get_job_scheduler
from vidcraft.services.storage import StorageService
from vidcraft.services.videos import VideoService

logger = get_logger(__name__)

NO_SPEECH_MESSAGE = (
    "No speech detected in the file. Please ensure your video/audio contains clear speech."
)


class TranscriptionJobManager:
    """Schedules, runs and clears transcriptions for video records."""

    def __init__(
        self,
        provider: TranscriptionProvider | None = None,
        storage: StorageService | None = None,
        scheduler: JobScheduler | None = None,
    ) -> None:
        self.provider = provider or get_transcription_provider()
        self.storage = storage or StorageService()
        self.scheduler = scheduler or get_job_scheduler()

    async def schedule(self, video_id: str | UUID, user_id: str) -> dict[str, Any]:
        """Mark the video as processing and enqueue the job.

        Raises:
            NotFoundError: If the video does not exist
            PermissionDeniedError: If the video belongs to another user
        """
        with get_session_context() as session:
            video = VideoService(session).get(video_id, user_id)
            video.transcription_status = TranscriptionStatus.PROCESSING
            video.transcription_error = None
            video_key = str(video.id)

        try:
            await self.scheduler.schedule_transcription(video_key)
        except Exception as e:
            # No job will ever finish this video, so don't leave it processing
            message = user_message(e)
            logger.error("transcription_enqueue_failed", video_id=video_key, error=message)
            self._finish(video_key, TranscriptionStatus.FAILED, error=message)
            raise

        logger.info("transcription_scheduled", video_id=video_key, scheduler=self.scheduler.name)
        return {"scheduled": True}

    def _file_request(self, video_id: str | UUID) -> TranscriptionRequest:
        with get_session_context() as session:
            video = VideoService(session).get(video_id, None)
            if video.storage_id:
                file_url = self.storage.get_url(video.storage_id)
            elif video.video_url:
                file_url = video.video_url
            else:
                raise TranscriptionError("Video has no stored file to transcribe")

            file_type = "audio" if (video.mime_type or "").startswith("audio/") else "video"
            return TranscriptionRequest(
                file_url=file_url,
                file_type=file_type,
                file_name=video.file_name,
                mime_type=video.mime_type,
            )

    def _finish(
        self,
        video_id: str | UUID,
        status: TranscriptionStatus,
        text: str | None = None,
        error: str | None = None,
    ) -> None:
        with get_session_context() as session:
            video = VideoService(session).get(video_id, None)
            video.transcription_status = status
            video.transcription_error = error
            if text is not None:
                video.transcription = text

    async def run(self, video_id: str | UUID) -> TranscriptionStatus:
        """Call the provider and persist the outcome.

        Never raises for provider failures: the message is stored on the
        video instead. No automatic retries.
        """
        log = logger.bind(video_id=str(video_id), provider=self.provider.name)
        log.info("transcription_started")

        try:
            request = self._file_request(video_id)
        except NotFoundError:
            log.warning("transcription_video_missing")
            return TranscriptionStatus.FAILED
        except Exception as e:
            self._finish(video_id, TranscriptionStatus.FAILED, error=user_message(e))
            error_tracker.record(e, context="transcription")
            return TranscriptionStatus.FAILED

        try:
            result = await self.provider.transcribe(request)
            if not result.success:
                raise TranscriptionError(result.error_message or "Transcription failed")
            text = (result.text or "").strip()
            if not text:
                raise TranscriptionError(NO_SPEECH_MESSAGE)
        except Exception as e:
            message = user_message(e)
            error_tracker.record(e, context="transcription")
            log.error("transcription_failed", error=message)
            self._finish(video_id, TranscriptionStatus.FAILED, error=message)
            return TranscriptionStatus.FAILED

        self._finish(video_id, TranscriptionStatus.COMPLETED, text=text)
        log.info(
            "transcription_completed",
            characters=len(text),
            language=result.language_code,
        )
        return TranscriptionStatus.COMPLETED

    def status(self, video_id: str | UUID, user_id: str) -> dict[str, Any]:
        with get_session_context() as session:
            video = VideoService(session).get(video_id, user_id)
            return {
                "video_id": str(video.id),
                "status": video.transcription_status,
                "transcription": video.transcription,
                "error": video.transcription_error,
            }

    def clear(self, video_id: str | UUID, user_id: str) -> None:
        """Drop the transcription and return the video to idle."""
        with get_session_context() as session:
            video = VideoService(session).get(video_id, user_id)
            video.transcription = None
            video.transcription_error = None
            video.transcription_status = TranscriptionStatus.IDLE
        logger.info("transcription_cleared", video_id=str(video_id))
