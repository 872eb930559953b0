"""ASGI application: ``uvicorn vidcraft.main:app``."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vidcraft import __version__
from vidcraft.api.routes import (
    agents,
    articles,
    canvas,
    files,
    generation,
    health,
    profiles,
    projects,
    shares,
    transcription,
    videos,
)
from vidcraft.config import settings
from vidcraft.errors import ServiceError, error_tracker
from vidcraft.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

API_PREFIX = "/api/v1"

# Health stays at the root so probes don't depend on the API version
API_ROUTERS = (
    projects.router,
    videos.router,
    transcription.router,
    agents.router,
    articles.router,
    canvas.router,
    shares.router,
    profiles.router,
    files.router,
    generation.router,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    from vidcraft.db.session import init_db

    logger.info("vidcraft_starting", version=__version__, scheduler=settings.job_scheduler)
    try:
        init_db(create_tables=settings.database_url.startswith("sqlite"))
    except Exception as e:
        # /health/ready reports this; keep serving liveness
        logger.error("database_unavailable", error=str(e))
    yield
    logger.info("vidcraft_stopped")


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render a ServiceError as ``{"error": {...}}`` with its status code."""
    error_tracker.record(exc, context=request.url.path)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


def create_app() -> FastAPI:
    application = FastAPI(
        title="VidCraft AI",
        description="AI content studio that turns YouTube videos into titles, thumbnails and posts",
        version=__version__,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_exception_handler(ServiceError, service_error_handler)

    application.include_router(health.router)
    for router in API_ROUTERS:
        application.include_router(router, prefix=API_PREFIX)

    @application.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {"name": "VidCraft AI", "version": __version__, "docs": "/docs"}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vidcraft.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
