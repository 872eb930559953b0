"""Image generation adapters for thumbnail agents."""

from vidcraft.adapters.image_gen.base import (
    THUMBNAIL_SIZE,
    ImageGenProvider,
    ImageGenRequest,
    ImageGenResult,
)
from vidcraft.adapters.image_gen.openai_dalle import OpenAIDalleProvider
from vidcraft.adapters.image_gen.stub import StubImageGenProvider
from vidcraft.config import settings


def get_image_gen_provider() -> ImageGenProvider:
    """Get the configured thumbnail renderer (``dalle`` or ``stub``)."""
    if settings.image_gen_provider.lower() == "stub":
        return StubImageGenProvider()
    return OpenAIDalleProvider()


__all__ = [
    "THUMBNAIL_SIZE",
    "ImageGenProvider",
    "ImageGenRequest",
    "ImageGenResult",
    "OpenAIDalleProvider",
    "StubImageGenProvider",
    "get_image_gen_provider",
]
