"""Speech-to-text adapters."""

from vidcraft.adapters.transcription.base import (
    TranscriptionProvider,
    TranscriptionRequest,
    TranscriptionResult,
)
from vidcraft.adapters.transcription.elevenlabs import ElevenLabsTranscriptionProvider
from vidcraft.adapters.transcription.stub import StubTranscriptionProvider
from vidcraft.adapters.transcription.whisper import WhisperProvider
from vidcraft.config import settings


def get_transcription_provider() -> TranscriptionProvider:
    """Get the configured speech-to-text provider."""
    provider_name = settings.transcription_provider.lower()
    if provider_name == "stub":
        return StubTranscriptionProvider()
    if provider_name == "elevenlabs":
        return ElevenLabsTranscriptionProvider()
    return WhisperProvider()


__all__ = [
    "ElevenLabsTranscriptionProvider",
    "StubTranscriptionProvider",
    "TranscriptionProvider",
    "TranscriptionRequest",
    "TranscriptionResult",
    "WhisperProvider",
    "get_transcription_provider",
]
