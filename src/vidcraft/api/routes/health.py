"""Liveness, readiness and error statistics."""

from typing import Any

from fastapi import APIRouter, status
from pydantic import BaseModel

from vidcraft import __version__
from vidcraft.adapters.image_gen import get_image_gen_provider
from vidcraft.adapters.llm import get_llm_provider
from vidcraft.adapters.transcription import get_transcription_provider
from vidcraft.config import settings
from vidcraft.db.session import check_database
from vidcraft.errors import error_tracker
from vidcraft.logging import get_logger

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    status: str
    version: str
    components: dict[str, bool] | None = None


class ReadinessResponse(BaseModel):
    ready: bool
    database: bool
    redis: bool
    components: dict[str, bool] | None = None


def _configured_backends() -> dict[str, str]:
    return {
        "llm": settings.llm_provider,
        "image_gen": settings.image_gen_provider,
        "transcription": settings.transcription_provider,
        "metadata": settings.metadata_provider,
        "scrape": settings.scrape_provider,
    }


def _database_ok() -> bool:
    try:
        return check_database()
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        return False


def _broker_ok() -> bool:
    # The memory and inline schedulers never touch Redis
    if settings.job_scheduler != "celery":
        return True
    try:
        import redis

        return bool(redis.from_url(settings.redis_url).ping())
    except Exception as e:
        logger.error("redis_health_check_failed", error=str(e))
        return False


async def _provider_status() -> dict[str, bool]:
    results: dict[str, bool] = {}
    providers = (get_llm_provider(), get_image_gen_provider(), get_transcription_provider())
    for provider in providers:
        try:
            results[provider.name] = await provider.health_check()
        except Exception as e:
            logger.error("provider_health_check_failed", provider=provider.name, error=str(e))
            results[provider.name] = False
    return results


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Reports whether each AI concern runs on a real backend or a stub.",
)
async def health_check() -> HealthResponse:
    backends = _configured_backends()
    return HealthResponse(
        status="healthy",
        version=__version__,
        components={name: backend != "stub" for name, backend in backends.items()},
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Checks the database, the job broker and every configured AI provider.",
)
async def readiness_check() -> ReadinessResponse:
    database = _database_ok()
    broker = _broker_ok()
    components = await _provider_status()

    return ReadinessResponse(
        ready=database and broker and all(components.values()),
        database=database,
        redis=broker,
        components=components,
    )


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
)
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}


@router.get(
    "/health/errors",
    summary="Error statistics",
    description="Failure counts per category and the most recent failures.",
)
async def error_stats() -> dict[str, Any]:
    return error_tracker.stats()
