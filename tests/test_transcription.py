"""Tests for transcription jobs and speech-to-text providers."""

import asyncio
import json

import httpx
import pytest

from vidcraft.adapters.transcription import (
    ElevenLabsTranscriptionProvider,
    StubTranscriptionProvider,
    TranscriptionRequest,
    WhisperProvider,
)
from vidcraft.db.session import get_session_context
from vidcraft.domain.enums import TranscriptionStatus
from vidcraft.services.projects import ProjectService
from vidcraft.services.scheduler import InMemoryJobScheduler
from vidcraft.services.transcription import NO_SPEECH_MESSAGE, TranscriptionJobManager
from vidcraft.services.videos import VideoService

FILE_URL = "https://files.example.com/video.mp4"


def create_video(user_id: str, **kwargs) -> str:
    kwargs.setdefault("video_url", FILE_URL)
    with get_session_context() as session:
        project = ProjectService(session).create(user_id, "Transcripts")
        video = VideoService(session).create(user_id, project.id, "Episode 1", **kwargs)
        return str(video.id)


def make_manager(provider, storage) -> TranscriptionJobManager:
    return TranscriptionJobManager(
        provider=provider, storage=storage, scheduler=InMemoryJobScheduler()
    )


class TestTranscriptionJobManager:
    @pytest.mark.asyncio
    async def test_schedule_marks_processing_and_queues(self, user_id: str, storage) -> None:
        video_id = create_video(user_id)
        manager = make_manager(StubTranscriptionProvider(), storage)

        assert await manager.schedule(video_id, user_id) == {"scheduled": True}

        assert manager.status(video_id, user_id)["status"] == TranscriptionStatus.PROCESSING
        assert [job.name for job in manager.scheduler.pending] == ["transcription.run"]
        assert manager.scheduler.pending[0].kwargs == {"video_id": video_id}

    @pytest.mark.asyncio
    async def test_broker_outage_marks_failed(self, user_id: str, storage) -> None:
        class UnreachableBroker(InMemoryJobScheduler):
            async def enqueue(self, job_name: str, **kwargs) -> None:
                raise ConnectionError("Connection refused by broker")

        video_id = create_video(user_id)
        manager = TranscriptionJobManager(
            provider=StubTranscriptionProvider(), storage=storage, scheduler=UnreachableBroker()
        )

        with pytest.raises(ConnectionError):
            await manager.schedule(video_id, user_id)

        state = manager.status(video_id, user_id)
        assert state["status"] == TranscriptionStatus.FAILED
        assert state["error"] == "Connection refused by broker"

    @pytest.mark.asyncio
    async def test_run_completes(self, user_id: str, storage) -> None:
        video_id = create_video(user_id)
        provider = StubTranscriptionProvider(text="  Hello and welcome.  ")
        manager = make_manager(provider, storage)
        await manager.schedule(video_id, user_id)

        status = await manager.run(video_id)

        assert status is TranscriptionStatus.COMPLETED
        state = manager.status(video_id, user_id)
        assert state["status"] == TranscriptionStatus.COMPLETED
        assert state["transcription"] == "Hello and welcome."
        assert state["error"] is None
        assert provider.requests[0].file_url == FILE_URL
        assert provider.requests[0].file_type == "video"

    @pytest.mark.asyncio
    async def test_stored_file_is_transcribed_by_url(self, user_id: str, storage) -> None:
        asset = storage.store_bytes(b"\x00" * 32, mime_type="audio/mpeg", kind="audio")
        video_id = create_video(
            user_id, video_url=None, storage_id=asset.id, mime_type="audio/mpeg"
        )
        provider = StubTranscriptionProvider()

        await make_manager(provider, storage).run(video_id)

        assert provider.requests[0].file_url == storage.get_url(asset.id)
        assert provider.requests[0].file_type == "audio"

    @pytest.mark.asyncio
    async def test_blank_result_is_no_speech_failure(self, user_id: str, storage) -> None:
        video_id = create_video(user_id)
        manager = make_manager(StubTranscriptionProvider(text="   \n "), storage)

        status = await manager.run(video_id)

        assert status is TranscriptionStatus.FAILED
        state = manager.status(video_id, user_id)
        assert state["error"] == NO_SPEECH_MESSAGE
        assert state["transcription"] is None

    @pytest.mark.asyncio
    async def test_provider_error_is_persisted(self, user_id: str, storage) -> None:
        video_id = create_video(user_id)
        manager = make_manager(
            StubTranscriptionProvider(error_message="Rate limit exceeded. Please try again."),
            storage,
        )

        assert await manager.run(video_id) is TranscriptionStatus.FAILED
        assert manager.status(video_id, user_id)["error"] == (
            "Rate limit exceeded. Please try again."
        )

    @pytest.mark.asyncio
    async def test_video_without_file_fails(self, user_id: str, storage) -> None:
        video_id = create_video(user_id, video_url=None)
        manager = make_manager(StubTranscriptionProvider(), storage)

        assert await manager.run(video_id) is TranscriptionStatus.FAILED
        assert manager.status(video_id, user_id)["error"] == (
            "Video has no stored file to transcribe"
        )

    @pytest.mark.asyncio
    async def test_clear_returns_to_idle(self, user_id: str, storage) -> None:
        video_id = create_video(user_id)
        manager = make_manager(StubTranscriptionProvider(), storage)
        await manager.run(video_id)

        manager.clear(video_id, user_id)

        state = manager.status(video_id, user_id)
        assert state["status"] == TranscriptionStatus.IDLE
        assert state["transcription"] is None


class TestWhisperProvider:
    @pytest.mark.asyncio
    async def test_downloads_then_transcribes(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url == FILE_URL:
                return httpx.Response(200, content=b"fake-mp4-bytes")
            return httpx.Response(200, text="Transcribed words")

        provider = WhisperProvider(api_key="sk-test", transport=httpx.MockTransport(handler))
        result = await provider.transcribe(TranscriptionRequest(file_url=FILE_URL))

        assert result.success is True
        assert result.text == "Transcribed words"
        upload = seen[1]
        assert upload.url.path == "/v1/audio/transcriptions"
        assert upload.headers["Authorization"] == "Bearer sk-test"
        assert b"whisper-1" in upload.content

    @pytest.mark.asyncio
    async def test_rejects_files_over_limit(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"\x00" * (1024 * 1024 + 1))

        provider = WhisperProvider(
            api_key="sk-test", max_file_size_mb=1, transport=httpx.MockTransport(handler)
        )
        result = await provider.transcribe(TranscriptionRequest(file_url=FILE_URL))

        assert result.success is False
        assert result.error_message.startswith("File is too large (1.0MB)")

    @pytest.mark.asyncio
    async def test_download_failure(self) -> None:
        provider = WhisperProvider(
            api_key="sk-test",
            transport=httpx.MockTransport(lambda request: httpx.Response(404)),
        )
        result = await provider.transcribe(TranscriptionRequest(file_url=FILE_URL))

        assert result.success is False
        assert result.error_message == "Failed to download file: 404 Not Found"

    @pytest.mark.asyncio
    async def test_slow_download_hits_total_deadline(self) -> None:
        class TrickleStream(httpx.AsyncByteStream):
            async def __aiter__(self):
                for _ in range(100):
                    await asyncio.sleep(0.02)
                    yield b"\x00" * 64

        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, stream=TrickleStream())

        provider = WhisperProvider(
            api_key="sk-test", download_timeout=0.1, transport=httpx.MockTransport(handler)
        )
        result = await provider.transcribe(TranscriptionRequest(file_url=FILE_URL))

        assert result.error_message == "Download timeout: The file took too long to download."
        assert [r.method for r in requests] == ["GET"]

    @pytest.mark.asyncio
    async def test_oversized_stream_stops_early(self) -> None:
        chunks_sent: list[int] = []

        class EndlessStream(httpx.AsyncByteStream):
            async def __aiter__(self):
                for _ in range(64):
                    chunks_sent.append(1)
                    yield b"\x00" * (256 * 1024)

        provider = WhisperProvider(
            api_key="sk-test",
            max_file_size_mb=1,
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, stream=EndlessStream())
            ),
        )
        result = await provider.transcribe(TranscriptionRequest(file_url=FILE_URL))

        assert result.error_message.startswith("File is too large (1.2MB)")
        assert len(chunks_sent) == 5

    @pytest.mark.asyncio
    async def test_rate_limited(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, content=b"data")
            return httpx.Response(429, json={"error": {"message": "slow down"}})

        provider = WhisperProvider(api_key="sk-test", transport=httpx.MockTransport(handler))
        result = await provider.transcribe(TranscriptionRequest(file_url=FILE_URL))

        assert result.error_message == "Too many transcription requests. Please try again later."

    @pytest.mark.asyncio
    async def test_missing_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from vidcraft.config import settings

        monkeypatch.setattr(settings, "openai_api_key", None)
        result = await WhisperProvider().transcribe(TranscriptionRequest(file_url=FILE_URL))

        assert result.success is False
        assert "OPENAI_API_KEY" in result.error_message


class TestElevenLabsProvider:
    @pytest.mark.asyncio
    async def test_checks_url_then_submits(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.method == "HEAD":
                return httpx.Response(200)
            return httpx.Response(
                200,
                json={
                    "text": "Bonjour tout le monde",
                    "language_code": "fr",
                    "language_probability": 0.97,
                    "words": [{"text": "Bonjour", "type": "word"}],
                },
            )

        provider = ElevenLabsTranscriptionProvider(
            api_key="xi-test", transport=httpx.MockTransport(handler)
        )
        result = await provider.transcribe(TranscriptionRequest(file_url=FILE_URL))

        assert result.success is True
        assert result.text == "Bonjour tout le monde"
        assert result.language_code == "fr"
        assert [r.method for r in seen] == ["HEAD", "POST"]
        body = json.loads(seen[1].content)
        assert body == {"cloud_storage_url": FILE_URL, "model_id": "scribe_v1"}
        assert seen[1].headers["Xi-Api-Key"] == "xi-test"

    @pytest.mark.asyncio
    async def test_unreachable_file(self) -> None:
        provider = ElevenLabsTranscriptionProvider(
            api_key="xi-test",
            transport=httpx.MockTransport(lambda request: httpx.Response(403)),
        )
        result = await provider.transcribe(TranscriptionRequest(file_url=FILE_URL))

        assert result.success is False
        assert result.error_message == "File URL is not accessible (403)"

    @pytest.mark.asyncio
    async def test_auth_failure_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "HEAD":
                return httpx.Response(200)
            return httpx.Response(401, json={"detail": {"message": "invalid key"}})

        provider = ElevenLabsTranscriptionProvider(
            api_key="xi-bad", transport=httpx.MockTransport(handler)
        )
        result = await provider.transcribe(TranscriptionRequest(file_url=FILE_URL))

        assert result.error_message == (
            "ElevenLabs API authentication failed. Please check your API key."
        )
