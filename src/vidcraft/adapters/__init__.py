"""Adapters for external services."""

from vidcraft.adapters.image_gen.base import ImageGenProvider
from vidcraft.adapters.llm.base import LLMProvider
from vidcraft.adapters.transcription.base import TranscriptionProvider

__all__ = [
    "ImageGenProvider",
    "LLMProvider",
    "TranscriptionProvider",
]
