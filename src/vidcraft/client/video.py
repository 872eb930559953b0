"""Client-side video validation and the upload pipeline."""

import mimetypes
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from vidcraft.client.api_client import ApiClient
from vidcraft.domain.models import ValidationResult, VideoMetadata
from vidcraft.errors import ServiceError, UploadError, ValidationError
from vidcraft.logging import get_logger
from vidcraft.services.metadata import MetadataError, MetadataExtractor, get_metadata_extractor

logger = get_logger(__name__)

MAX_VIDEO_SIZE_BYTES = 100 * 1024 * 1024
SUPPORTED_VIDEO_TYPES = frozenset(
    {"video/mp4", "video/mov", "video/avi", "video/webm", "video/quicktime"}
)

# Preferred over mimetypes, which reports .avi as video/x-msvideo
_MIME_BY_SUFFIX = {
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".avi": "video/avi",
    ".webm": "video/webm",
}

ProgressCallback = Callable[[float], None]


@dataclass
class VideoFile:
    """A local video file about to be uploaded."""

    path: Path
    name: str
    size: int
    mime_type: str

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> "VideoFile":
        path = Path(path)
        if mime_type is None:
            mime_type = _MIME_BY_SUFFIX.get(path.suffix.lower())
        if mime_type is None:
            mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(path=path, name=path.name, size=path.stat().st_size, mime_type=mime_type)


def validate_video_file(file: VideoFile) -> ValidationResult:
    """Check size, type and name before anything is uploaded."""
    errors: list[str] = []

    if file.size > MAX_VIDEO_SIZE_BYTES:
        errors.append(f"File size ({file.size / 1024 / 1024:.1f}MB) exceeds maximum of 100MB")

    if file.mime_type.lower() not in SUPPORTED_VIDEO_TYPES:
        errors.append(f"File type {file.mime_type} is not supported. Use MP4, MOV, AVI, or WebM")

    if not file.name:
        errors.append("File must have a valid name")

    return ValidationResult(is_valid=not errors, errors=errors)


@dataclass
class VideoUploadResult:
    video_id: str
    storage_id: str
    metadata: VideoMetadata | None = None


class VideoUploader:
    """Uploads a video through the API and fills in its metadata.

    Progress is reported in order: 0.1 basic metadata, 0.2 upload slot,
    0.3 transfer, 0.5 transferred, 0.6 record created, then 0.6-1.0 while
    full metadata is extracted.
    """

    def __init__(self, api: ApiClient, extractor: MetadataExtractor | None = None) -> None:
        self.api = api
        self.extractor = extractor or get_metadata_extractor()

    async def _basic_metadata(self, file: VideoFile) -> VideoMetadata:
        try:
            metadata = await self.extractor.extract_basic(file.path)
        except MetadataError as e:
            logger.warning("basic_metadata_failed", file_name=file.name, error=e.message)
            metadata = VideoMetadata()
        metadata.file_size = file.size
        metadata.mime_type = file.mime_type
        return metadata

    async def _transfer(self, upload_url: str, file: VideoFile) -> str:
        try:
            response = await self.api.request(
                "POST",
                upload_url,
                content=file.path.read_bytes(),
                headers={"Content-Type": file.mime_type},
            )
        except ServiceError as e:
            raise UploadError(
                f"Upload failed: {e.message}",
                status_code=e.status_code,
                details=e.details,
            ) from e
        return response.json()["storage_id"]

    async def upload_video(
        self,
        file: VideoFile,
        project_id: str,
        *,
        title: str | None = None,
        canvas_position: tuple[float, float] = (0.0, 0.0),
        on_progress: ProgressCallback | None = None,
        auto_transcribe: bool = False,
    ) -> VideoUploadResult:
        """Run the upload pipeline for one file.

        Raises:
            ValidationError: If the file fails validation
            UploadError: If the transfer is rejected
        """
        validation = validate_video_file(file)
        if not validation.is_valid:
            raise ValidationError("; ".join(validation.errors), errors=validation.errors)

        def progress(value: float) -> None:
            if on_progress:
                on_progress(value)

        log = logger.bind(project_id=project_id, file_name=file.name, file_size=file.size)

        progress(0.1)
        basic = await self._basic_metadata(file)

        progress(0.2)
        slot = await self.api.mutation(
            "POST", "/api/v1/files/upload-url", json={"content_type": file.mime_type}
        )

        progress(0.3)
        storage_id = await self._transfer(slot["upload_url"], file)
        progress(0.5)

        video: dict[str, Any] = await self.api.mutation(
            "POST",
            f"/api/v1/projects/{project_id}/videos",
            json={
                "title": title or file.name,
                "storage_id": storage_id,
                "file_name": file.name,
                "file_size": file.size,
                "mime_type": file.mime_type,
                "canvas_x": canvas_position[0],
                "canvas_y": canvas_position[1],
            },
        )
        video_id = video["id"]
        progress(0.6)

        full: VideoMetadata | None = None
        try:
            full = await self.extractor.extract_full(
                file.path, on_progress=lambda p: progress(0.6 + p * 0.4)
            )
            full.file_size = full.file_size or file.size
            full.mime_type = file.mime_type
            await self.api.mutation(
                "PUT", f"/api/v1/videos/{video_id}/metadata", json=full.to_dict()
            )
        except Exception as e:
            # The video record already exists; basic metadata keeps it usable
            log.warning(
                "full_metadata_failed_using_basic", error=str(e), error_type=type(e).__name__
            )
            full = None
            if basic.has_basic_info:
                try:
                    await self.api.mutation(
                        "PUT", f"/api/v1/videos/{video_id}/metadata", json=basic.to_dict()
                    )
                except ServiceError as persist_error:
                    log.warning("basic_metadata_not_saved", error=persist_error.message)

        if auto_transcribe:
            await self.api.mutation("POST", f"/api/v1/videos/{video_id}/transcription")

        progress(1.0)
        log.info("video_uploaded", video_id=video_id, storage_id=storage_id)
        return VideoUploadResult(video_id=video_id, storage_id=storage_id, metadata=full)
