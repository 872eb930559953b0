"""End-to-end tests for the client upload pipeline against the API."""

from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from vidcraft.client.api_client import ApiClient
from vidcraft.client.video import VideoFile, VideoUploader
from vidcraft.errors import ServiceError, ValidationError
from vidcraft.main import app
from vidcraft.services.metadata import StubMetadataExtractor


@pytest.fixture
def video_file(tmp_path: Path) -> VideoFile:
    path = tmp_path / "demo.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42" + b"\x00" * (2 * 1024 * 1024))
    return VideoFile.from_path(path)


def make_api(user_id: str) -> ApiClient:
    return ApiClient(
        base_url="http://testserver",
        user_id=user_id,
        transport=httpx.ASGITransport(app=app),
    )


@pytest.mark.asyncio
async def test_upload_creates_video_with_metadata(
    test_client: TestClient,
    auth_headers: dict[str, str],
    user_id: str,
    project: dict,
    video_file: VideoFile,
) -> None:
    progress: list[float] = []

    async with make_api(user_id) as api:
        result = await VideoUploader(api, StubMetadataExtractor()).upload_video(
            video_file, project["id"], title="Demo", on_progress=progress.append
        )

    assert progress == sorted(progress)
    assert progress[0] == 0.1
    assert progress[-1] == 1.0
    # Transfer finishes before the record is created
    assert progress.index(0.5) < progress.index(0.6)
    assert result.metadata is not None
    assert result.metadata.codec == "h264"

    video = test_client.get(f"/api/v1/videos/{result.video_id}", headers=auth_headers).json()
    assert video["title"] == "Demo"
    assert video["storage_id"] == result.storage_id
    assert video["file_size"] == video_file.size
    assert video["mime_type"] == "video/mp4"
    assert video["metadata"]["duration"] == 120.0
    assert video["metadata"]["codec"] == "h264"
    assert video["metadata"]["resolution"] == {"width": 1920, "height": 1080}

    stored = test_client.get(f"/api/v1/files/{result.storage_id}")
    assert stored.status_code == 200
    assert len(stored.content) == video_file.size


@pytest.mark.asyncio
async def test_full_metadata_failure_falls_back_to_basic(
    test_client: TestClient,
    auth_headers: dict[str, str],
    user_id: str,
    project: dict,
    video_file: VideoFile,
) -> None:
    async with make_api(user_id) as api:
        result = await VideoUploader(api, StubMetadataExtractor(fail_full=True)).upload_video(
            video_file, project["id"]
        )

    assert result.metadata is None
    video = test_client.get(f"/api/v1/videos/{result.video_id}", headers=auth_headers).json()
    assert video["title"] == "demo.mp4"
    assert video["metadata"]["duration"] == 120.0
    assert "codec" not in video["metadata"]


class CrashingExtractor(StubMetadataExtractor):
    async def extract_full(self, path: Path, on_progress=None):
        raise RuntimeError("ffprobe segfaulted")


@pytest.mark.asyncio
async def test_unexpected_extractor_error_still_uploads(
    test_client: TestClient,
    auth_headers: dict[str, str],
    user_id: str,
    project: dict,
    video_file: VideoFile,
) -> None:
    progress: list[float] = []

    async with make_api(user_id) as api:
        result = await VideoUploader(api, CrashingExtractor()).upload_video(
            video_file, project["id"], on_progress=progress.append
        )

    assert result.metadata is None
    assert progress[-1] == 1.0
    video = test_client.get(f"/api/v1/videos/{result.video_id}", headers=auth_headers).json()
    assert video["metadata"]["duration"] == 120.0


@pytest.mark.asyncio
async def test_upload_then_transcribe(
    test_client: TestClient,
    auth_headers: dict[str, str],
    user_id: str,
    project: dict,
    tmp_path: Path,
    scheduler,
) -> None:
    path = tmp_path / "talk.mp4"
    path.write_bytes(b"\x00" * (10 * 1024 * 1024))

    async with make_api(user_id) as api:
        result = await VideoUploader(api, StubMetadataExtractor()).upload_video(
            VideoFile.from_path(path), project["id"], auto_transcribe=True
        )

    url = f"/api/v1/videos/{result.video_id}/transcription"
    assert [job.name for job in scheduler.pending] == ["transcription.run"]
    assert test_client.get(url, headers=auth_headers).json()["status"] == "processing"

    await scheduler.run_pending()

    state = test_client.get(url, headers=auth_headers).json()
    assert state["status"] == "completed"
    assert state["transcription"]


@pytest.mark.asyncio
async def test_invalid_file_rejected_before_any_request(tmp_path: Path, project: dict) -> None:
    path = tmp_path / "clip.mkv"
    path.write_bytes(b"\x1a\x45\xdf\xa3")
    sent: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return httpx.Response(500)

    api = ApiClient(base_url="http://testserver", transport=httpx.MockTransport(handler))
    async with api:
        with pytest.raises(ValidationError, match="is not supported"):
            await VideoUploader(api, StubMetadataExtractor()).upload_video(
                VideoFile.from_path(path), project["id"]
            )

    assert sent == []


class TestUploadSlots:
    def test_slot_is_single_use(self, test_client: TestClient, auth_headers: dict[str, str]) -> None:
        upload_url = test_client.post(
            "/api/v1/files/upload-url", json={"content_type": "video/mp4"}, headers=auth_headers
        ).json()["upload_url"]
        assert upload_url.startswith("http://testserver/api/v1/files/upload/")

        first = test_client.post(
            upload_url, content=b"video-bytes", headers={"Content-Type": "video/mp4"}
        )
        second = test_client.post(
            upload_url, content=b"video-bytes", headers={"Content-Type": "video/mp4"}
        )

        assert first.status_code == 200
        assert first.json()["file_size"] == len(b"video-bytes")
        assert first.json()["mime_type"] == "video/mp4"
        assert second.status_code == 409
        assert second.json()["error"]["message"] == "Upload URL has already been used"

    def test_empty_body_rejected(self, test_client: TestClient, auth_headers: dict[str, str]) -> None:
        upload_url = test_client.post(
            "/api/v1/files/upload-url", headers=auth_headers
        ).json()["upload_url"]

        response = test_client.post(upload_url, content=b"")

        assert response.status_code == 400
        assert response.json()["error"]["category"] == "upload"

    def test_unknown_token(self, test_client: TestClient) -> None:
        response = test_client.post("/api/v1/files/upload/nope", content=b"data")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_client_reports_rejected_transfer(self, user_id: str) -> None:
        async with make_api(user_id) as api:
            with pytest.raises(ServiceError) as exc_info:
                await api.request("POST", "/api/v1/files/upload/nope", content=b"data")

        assert exc_info.value.status_code == 404
