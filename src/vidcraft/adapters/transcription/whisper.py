"""OpenAI Whisper transcription provider.

Downloads the stored file and uploads it as multipart form data. Whisper
caps uploads at 25MB, so oversized files are rejected before the upload.
"""

import asyncio

import httpx

from vidcraft.adapters.transcription.base import (
    TranscriptionProvider,
    TranscriptionRequest,
    TranscriptionResult,
)
from vidcraft.config import settings
from vidcraft.logging import get_logger

logger = get_logger(__name__)

MB = 1024 * 1024


class WhisperProvider(TranscriptionProvider):
    """Speech-to-text via the OpenAI audio transcriptions endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "whisper-1",
        base_url: str = "https://api.openai.com/v1",
        max_file_size_mb: int | None = None,
        download_timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key
        self.model = model
        self.base_url = base_url
        self.max_file_size = (max_file_size_mb or settings.whisper_max_file_size_mb) * MB
        self.download_timeout = download_timeout or settings.transcription_download_timeout
        self._transport = transport

        if not self.api_key:
            logger.warning("OpenAI API key not configured for Whisper provider")

    @property
    def name(self) -> str:
        return f"whisper:{self.model}"

    async def _download(self, client: httpx.AsyncClient, url: str) -> bytes:
        """Stream the file under one deadline for the whole transfer."""
        chunks: list[bytes] = []
        received = 0
        try:
            async with asyncio.timeout(self.download_timeout):
                async with client.stream("GET", url, follow_redirects=True) as response:
                    if response.status_code != 200:
                        raise _TranscriptionFailure(
                            f"Failed to download file: {response.status_code} {response.reason_phrase}"
                        )
                    declared = int(response.headers.get("content-length") or 0)
                    if declared > self.max_file_size:
                        raise _TranscriptionFailure(self._too_large_message(declared))
                    async for chunk in response.aiter_bytes():
                        received += len(chunk)
                        if received > self.max_file_size:
                            raise _TranscriptionFailure(self._too_large_message(received))
                        chunks.append(chunk)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise _TranscriptionFailure("Download timeout: The file took too long to download.") from e
        except httpx.HTTPError as e:
            raise _TranscriptionFailure(f"Network error while downloading file: {e}") from e
        return b"".join(chunks)

    def _too_large_message(self, size: int) -> str:
        return (
            f"File is too large ({size / MB:.1f}MB). Maximum size for transcription "
            f"is {self.max_file_size // MB}MB. For larger files, please use audio extraction."
        )

    async def transcribe(self, request: TranscriptionRequest) -> TranscriptionResult:
        """Download the file and transcribe it with Whisper."""
        if not self.api_key:
            return TranscriptionResult(
                success=False,
                error_message="OpenAI API key not configured. Set OPENAI_API_KEY to enable transcription.",
            )

        try:
            async with httpx.AsyncClient(
                timeout=settings.transcription_timeout, transport=self._transport
            ) as client:
                data = await self._download(client, request.file_url)

                size_mb = len(data) / MB
                if not data:
                    raise _TranscriptionFailure("The file appears to be empty or corrupted.")

                is_audio = request.file_type == "audio"
                file_name = request.file_name or ("audio.mp3" if is_audio else "video.mp4")
                mime_type = request.mime_type or ("audio/mpeg" if is_audio else "video/mp4")

                logger.info(
                    "whisper_request",
                    file_type=request.file_type,
                    size_mb=round(size_mb, 1),
                )

                try:
                    response = await client.post(
                        f"{self.base_url}/audio/transcriptions",
                        headers={"Authorization": f"Bearer {self.api_key}"},
                        data={"model": self.model, "response_format": "text"},
                        files={"file": (file_name, data, mime_type)},
                    )
                except httpx.TimeoutException as e:
                    raise _TranscriptionFailure(
                        "Transcription timeout. The video might be too long."
                    ) from e

                if response.status_code != 200:
                    raise _TranscriptionFailure(_whisper_error_message(response))

                text = response.text

        except _TranscriptionFailure as e:
            logger.warning("whisper_transcription_failed", error=e.message)
            return TranscriptionResult(success=False, error_message=e.message)
        except httpx.HTTPError as e:
            logger.error("whisper_transcription_exception", error=str(e))
            return TranscriptionResult(
                success=False,
                error_message=f"Transcription failed: {e}",
            )

        logger.info("whisper_transcription_completed", characters=len(text))
        return TranscriptionResult(
            success=True,
            text=text,
            metadata={"provider": self.name, "size_bytes": len(data)},
        )

    async def health_check(self) -> bool:
        return bool(self.api_key)


class _TranscriptionFailure(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _whisper_error_message(response: httpx.Response) -> str:
    """Map a Whisper error response to user-facing text."""
    if response.status_code == 413:
        return "File too large for Whisper API. Please try a shorter video."
    if response.status_code == 400:
        return "Invalid audio format. The video might be corrupted or use an unsupported codec."
    if response.status_code == 429:
        return "Too many transcription requests. Please try again later."
    try:
        detail = response.json().get("error", {}).get("message")
    except ValueError:
        detail = None
    return f"Transcription failed: {detail or f'HTTP {response.status_code}'}"
