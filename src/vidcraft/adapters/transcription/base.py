"""Base interface for speech-to-text providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class TranscriptionRequest:
    """Request to transcribe a stored video or audio file."""

    file_url: str  # Publicly reachable URL of the stored file
    file_type: str = "video"  # "video" or "audio"
    file_name: str | None = None
    mime_type: str | None = None
    language: str | None = None


@dataclass
class TranscriptionResult:
    """Result from a speech-to-text provider."""

    success: bool
    text: str = ""
    language_code: str | None = None
    language_probability: float | None = None
    words: list[dict[str, Any]] = field(default_factory=list)
    error_message: str | None = None  # Always user-readable
    metadata: dict[str, Any] = field(default_factory=dict)


class TranscriptionProvider(ABC):
    """Abstract base class for speech-to-text providers.

    Implementations:
    - WhisperProvider: downloads the file and uploads it to OpenAI Whisper
    - ElevenLabsTranscriptionProvider: hands ElevenLabs a cloud URL
    - StubTranscriptionProvider: Returns canned text for testing
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def transcribe(self, request: TranscriptionRequest) -> TranscriptionResult:
        """Transcribe the file at request.file_url.

        Failures are reported through ``TranscriptionResult.error_message``
        with text safe to show the user.
        """
        ...

    async def health_check(self) -> bool:
        """Check if the provider is available."""
        return True
