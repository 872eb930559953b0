"""Python client for the VidCraft API."""

from vidcraft.client.api_client import ApiClient, ParallelResult
from vidcraft.client.video import (
    VideoFile,
    VideoUploader,
    VideoUploadResult,
    validate_video_file,
)

__all__ = [
    "ApiClient",
    "ParallelResult",
    "VideoFile",
    "VideoUploadResult",
    "VideoUploader",
    "validate_video_file",
]
