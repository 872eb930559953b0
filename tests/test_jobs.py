"""Tests for background job scheduling and the Celery tasks."""

import pytest

from vidcraft.db.session import get_session_context
from vidcraft.domain.enums import AgentStatus, TranscriptionStatus
from vidcraft.jobs.runners import run_thumbnail_job, run_transcription_job
from vidcraft.jobs.tasks import transcribe_video_task
from vidcraft.services.agents import AgentService
from vidcraft.services.projects import ProjectService
from vidcraft.services.scheduler import (
    InlineJobScheduler,
    InMemoryJobScheduler,
    get_job_scheduler,
)
from vidcraft.services.videos import VideoService
from vidcraft.utils import run_async

VIDEO_URL = "https://files.example.com/episode.mp4"


def create_video(user_id: str) -> str:
    with get_session_context() as session:
        project = ProjectService(session).create(user_id, "Jobs")
        video = VideoService(session).create(user_id, project.id, "Episode", video_url=VIDEO_URL)
        return str(video.id)


def transcription_status(video_id: str) -> str:
    with get_session_context() as session:
        return VideoService(session).get(video_id, None).transcription_status


def test_configured_scheduler_is_shared() -> None:
    scheduler = get_job_scheduler()

    assert isinstance(scheduler, InMemoryJobScheduler)
    assert get_job_scheduler() is scheduler


@pytest.mark.asyncio
async def test_memory_scheduler_runs_in_order(user_id: str) -> None:
    first, second = create_video(user_id), create_video(user_id)
    scheduler = InMemoryJobScheduler()

    await scheduler.schedule_transcription(first)
    await scheduler.schedule_transcription(second)
    results = await scheduler.run_pending()

    assert [r["video_id"] for r in results] == [first, second]
    assert all(r["status"] == "completed" for r in results)
    assert scheduler.pending == []


@pytest.mark.asyncio
async def test_inline_scheduler_runs_immediately(user_id: str) -> None:
    video_id = create_video(user_id)

    await InlineJobScheduler().schedule_transcription(video_id)

    assert transcription_status(video_id) == TranscriptionStatus.COMPLETED


@pytest.mark.asyncio
async def test_transcription_runner(user_id: str) -> None:
    video_id = create_video(user_id)

    result = await run_transcription_job(video_id)

    assert result == {"video_id": video_id, "status": "completed"}


@pytest.mark.asyncio
async def test_thumbnail_runner_reports_failure(user_id: str) -> None:
    video_id = create_video(user_id)
    with get_session_context() as session:
        agent_id = str(AgentService(session).create(user_id, video_id, "thumbnail").id)

    result = await run_thumbnail_job(agent_id, [])

    assert result["success"] is False
    assert result["error"] == "Video frames are required for thumbnail generation"
    with get_session_context() as session:
        assert AgentService(session).get(agent_id, user_id).status == AgentStatus.IDLE


def test_celery_task_runs_job(user_id: str) -> None:
    video_id = create_video(user_id)

    result = transcribe_video_task.apply(kwargs={"video_id": video_id}).get()

    assert result["status"] == "completed"
    assert transcription_status(video_id) == TranscriptionStatus.COMPLETED


@pytest.mark.asyncio
async def test_run_async_refuses_running_loop() -> None:
    async def noop() -> None:
        return None

    with pytest.raises(RuntimeError, match="running event loop"):
        run_async(noop())
