"""API route modules."""

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

__all__ = [
    "agents",
    "articles",
    "canvas",
    "files",
    "generation",
    "health",
    "profiles",
    "projects",
    "shares",
    "transcription",
    "videos",
]
