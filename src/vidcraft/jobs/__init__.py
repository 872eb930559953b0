"""Celery job definitions."""

from vidcraft.jobs.tasks import generate_thumbnail_task, transcribe_video_task

__all__ = [
    "generate_thumbnail_task",
    "transcribe_video_task",
]
