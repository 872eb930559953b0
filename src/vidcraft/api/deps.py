"""FastAPI dependencies."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from vidcraft.adapters.scrape import ScrapeProvider, get_scrape_provider
from vidcraft.services.generation import ContentGenerator
from vidcraft.services.refinement import ContentRefiner
from vidcraft.services.storage import StorageService
from vidcraft.services.transcription import TranscriptionJobManager


def get_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Caller identity, set by the authenticating proxy in front of the API."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return x_user_id.strip()


UserIdDep = Annotated[str, Depends(get_user_id)]


@lru_cache
def get_storage_service() -> StorageService:
    """Get the storage service instance."""
    return StorageService()


@lru_cache
def get_content_generator() -> ContentGenerator:
    """Get the content generator instance."""
    return ContentGenerator(storage=get_storage_service())


@lru_cache
def get_content_refiner() -> ContentRefiner:
    """Get the chat refiner instance."""
    return ContentRefiner()


@lru_cache
def get_scraper() -> ScrapeProvider:
    return get_scrape_provider()


@lru_cache
def get_transcription_manager() -> TranscriptionJobManager:
    """Get the transcription job manager instance."""
    return TranscriptionJobManager(storage=get_storage_service())


StorageServiceDep = Annotated[StorageService, Depends(get_storage_service)]
ContentGeneratorDep = Annotated[ContentGenerator, Depends(get_content_generator)]
ContentRefinerDep = Annotated[ContentRefiner, Depends(get_content_refiner)]
TranscriptionManagerDep = Annotated[TranscriptionJobManager, Depends(get_transcription_manager)]
ScraperDep = Annotated[ScrapeProvider, Depends(get_scraper)]
