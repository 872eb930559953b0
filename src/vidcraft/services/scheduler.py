"""Background job scheduling.

Services enqueue work through a JobScheduler so they never import Celery
directly. The Celery scheduler hands jobs to the worker; the memory scheduler
keeps a queue that the caller drains; the inline scheduler runs each job
before returning.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from vidcraft.config import settings
from vidcraft.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ScheduledJob:
    """A job waiting in an in-process queue."""

    name: str
    kwargs: dict[str, Any] = field(default_factory=dict)


def _runner_for(name: str) -> Callable[..., Awaitable[Any]]:
    from vidcraft.jobs import runners

    return {
        "transcription.run": runners.run_transcription_job,
        "thumbnail.generate": runners.run_thumbnail_job,
    }[name]


class JobScheduler(ABC):
    """Enqueues background jobs."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def enqueue(self, job_name: str, **kwargs: Any) -> None:
        ...

    async def schedule_transcription(self, video_id: str) -> None:
        await self.enqueue("transcription.run", video_id=video_id)

    async def schedule_thumbnail(self, agent_id: str, frames: list[dict[str, Any]]) -> None:
        await self.enqueue("thumbnail.generate", agent_id=agent_id, frames=frames)


class CeleryJobScheduler(JobScheduler):
    """Hands jobs to the Celery worker with zero countdown."""

    @property
    def name(self) -> str:
        return "celery"

    async def enqueue(self, job_name: str, **kwargs: Any) -> None:
        from vidcraft.worker import celery_app

        result = celery_app.send_task(job_name, kwargs=kwargs, countdown=0)
        logger.info("job_enqueued", job=job_name, task_id=result.id, **_loggable(kwargs))


class InMemoryJobScheduler(JobScheduler):
    """Queues jobs in process; ``run_pending`` executes them in order."""

    def __init__(self) -> None:
        self.pending: list[ScheduledJob] = []

    @property
    def name(self) -> str:
        return "memory"

    async def enqueue(self, job_name: str, **kwargs: Any) -> None:
        self.pending.append(ScheduledJob(name=job_name, kwargs=kwargs))
        logger.debug("job_queued", job=job_name, **_loggable(kwargs))

    async def run_pending(self) -> list[Any]:
        """Run every queued job, including ones queued while draining."""
        results = []
        while self.pending:
            job = self.pending.pop(0)
            results.append(await _runner_for(job.name)(**job.kwargs))
        return results


class InlineJobScheduler(JobScheduler):
    """Runs each job to completion inside ``enqueue``."""

    @property
    def name(self) -> str:
        return "inline"

    async def enqueue(self, job_name: str, **kwargs: Any) -> None:
        logger.debug("job_running_inline", job=job_name, **_loggable(kwargs))
        await _runner_for(job_name)(**kwargs)


def _loggable(kwargs: dict[str, Any]) -> dict[str, Any]:
    # Frames are base64 data URLs; log their count only
    return {k: (len(v) if k == "frames" else v) for k, v in kwargs.items()}


@lru_cache
def get_job_scheduler() -> JobScheduler:
    """Get the configured job scheduler (one per process)."""
    if settings.job_scheduler == "memory":
        return InMemoryJobScheduler()
    if settings.job_scheduler == "inline":
        return InlineJobScheduler()
    return CeleryJobScheduler()
