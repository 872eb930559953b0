"""Celery app for transcription and thumbnail jobs.

Start with ``vidcraft worker`` (or ``celery -A vidcraft.worker worker``).
"""

from celery import Celery

from vidcraft.config import settings
from vidcraft.logging import setup_logging

setup_logging()

TASK_QUEUES = {
    "transcription.run": "transcription",
    "thumbnail.generate": "generation",
}

celery_app = Celery(
    "vidcraft",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["vidcraft.jobs.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # A job that dies with its worker is redelivered, not lost
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    # Whisper uploads and DALL-E renders are slow; keep headroom over the provider timeouts
    task_soft_time_limit=int(settings.transcription_timeout) + 60,
    task_time_limit=int(settings.transcription_timeout) + 120,
    task_track_started=True,
    worker_prefetch_multiplier=1,
    result_expires=24 * 60 * 60,
    task_routes={name: {"queue": queue} for name, queue in TASK_QUEUES.items()},
)
