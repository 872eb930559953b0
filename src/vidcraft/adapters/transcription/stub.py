"""Stub transcription provider for testing."""

from vidcraft.adapters.transcription.base import (
    TranscriptionProvider,
    TranscriptionRequest,
    TranscriptionResult,
)
from vidcraft.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TRANSCRIPT = (
    "Hey everyone, welcome back to the channel. Today I'm going to show you how to "
    "set up a Python project from scratch, write your first tests, and ship it."
)


class StubTranscriptionProvider(TranscriptionProvider):
    """Returns a fixed transcript (or a fixed failure) without network calls."""

    def __init__(self, text: str = DEFAULT_TRANSCRIPT, error_message: str | None = None) -> None:
        self.text = text
        self.error_message = error_message
        self.requests: list[TranscriptionRequest] = []

    @property
    def name(self) -> str:
        return "stub"

    async def transcribe(self, request: TranscriptionRequest) -> TranscriptionResult:
        self.requests.append(request)
        logger.info("stub_transcription", file_url=request.file_url[:100])

        if self.error_message:
            return TranscriptionResult(success=False, error_message=self.error_message)

        return TranscriptionResult(
            success=True,
            text=self.text,
            language_code="en",
            language_probability=0.99,
            metadata={"provider": self.name},
        )
