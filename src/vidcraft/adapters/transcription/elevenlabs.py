"""ElevenLabs speech-to-text provider (Scribe).

ElevenLabs fetches the file itself from a cloud URL, so there is no local
size ceiling beyond the provider's own 1GB limit.
"""

import httpx

from vidcraft.adapters.transcription.base import (
    TranscriptionProvider,
    TranscriptionRequest,
    TranscriptionResult,
)
from vidcraft.config import settings
from vidcraft.logging import get_logger

logger = get_logger(__name__)

ELEVENLABS_STT_URL = "https://api.elevenlabs.io/v1/speech-to-text"

_STATUS_MESSAGES = {
    401: "ElevenLabs API authentication failed. Please check your API key.",
    413: "File is too large. ElevenLabs supports files up to 1GB.",
    429: "Rate limit exceeded. Please try again in a few moments.",
    500: "ElevenLabs service error. Please try again later.",
}


class ElevenLabsTranscriptionProvider(TranscriptionProvider):
    """Transcription via the ElevenLabs speech-to-text API."""

    def __init__(
        self,
        api_key: str | None = None,
        model_id: str = "scribe_v1",
        endpoint: str = ELEVENLABS_STT_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.elevenlabs_api_key
        self.model_id = model_id
        self.endpoint = endpoint
        self._transport = transport

        if not self.api_key:
            logger.warning("ElevenLabs API key not configured")

    @property
    def name(self) -> str:
        return f"elevenlabs:{self.model_id}"

    async def transcribe(self, request: TranscriptionRequest) -> TranscriptionResult:
        """Check the file URL is reachable, then submit it for transcription."""
        if not self.api_key:
            return TranscriptionResult(
                success=False,
                error_message=(
                    "ElevenLabs API key not configured. "
                    "Please add ELEVENLABS_API_KEY to your environment variables."
                ),
            )

        try:
            async with httpx.AsyncClient(
                timeout=settings.transcription_timeout, transport=self._transport
            ) as client:
                head = await client.head(
                    request.file_url,
                    timeout=settings.transcription_download_timeout,
                    follow_redirects=True,
                )
                if head.status_code >= 400:
                    return TranscriptionResult(
                        success=False,
                        error_message=f"File URL is not accessible ({head.status_code})",
                    )

                payload: dict[str, str] = {
                    "cloud_storage_url": request.file_url,
                    "model_id": self.model_id,
                }
                if request.language:
                    payload["language_code"] = request.language

                logger.info("elevenlabs_stt_request", model_id=self.model_id)

                response = await client.post(
                    self.endpoint,
                    headers={"Xi-Api-Key": self.api_key, "Content-Type": "application/json"},
                    json=payload,
                )

                if response.status_code != 200:
                    message = _elevenlabs_error_message(response)
                    logger.warning(
                        "elevenlabs_stt_failed",
                        status_code=response.status_code,
                        error=message,
                    )
                    return TranscriptionResult(success=False, error_message=message)

                data = response.json()

        except httpx.TimeoutException:
            logger.error("elevenlabs_stt_timeout")
            return TranscriptionResult(
                success=False,
                error_message="Transcription timeout. The video might be too long.",
            )
        except httpx.HTTPError as e:
            logger.error("elevenlabs_stt_exception", error=str(e))
            return TranscriptionResult(
                success=False,
                error_message=f"Network error during transcription: {e}",
            )

        words = data.get("words") or []
        logger.info(
            "elevenlabs_stt_completed",
            language=data.get("language_code"),
            word_count=sum(1 for w in words if w.get("type") == "word"),
        )

        return TranscriptionResult(
            success=True,
            text=data.get("text") or "",
            language_code=data.get("language_code"),
            language_probability=data.get("language_probability"),
            words=words,
            metadata={"provider": self.name},
        )

    async def health_check(self) -> bool:
        return bool(self.api_key)


def _elevenlabs_error_message(response: httpx.Response) -> str:
    """Map an ElevenLabs error response to user-facing text."""
    detail = ""
    try:
        body = response.json()
        raw = body.get("detail") if isinstance(body, dict) else None
        if isinstance(raw, dict):
            detail = str(raw.get("message") or "")
        elif raw:
            detail = str(raw)
    except ValueError:
        detail = response.text

    if response.status_code == 400:
        if "parsing the body" in detail:
            return "File format not supported. Please ensure your file is a valid video or audio file."
        if "model_id" in detail:
            return "Transcription model configuration error. Please try again."
    if response.status_code in _STATUS_MESSAGES:
        return _STATUS_MESSAGES[response.status_code]
    return detail or f"ElevenLabs API error ({response.status_code})"
