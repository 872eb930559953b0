"""Video metadata extraction via ffprobe."""

import asyncio
import json
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any

from vidcraft.config import settings
from vidcraft.domain.models import AudioInfo, Resolution, VideoMetadata
from vidcraft.errors import ErrorCategory, ServiceError
from vidcraft.logging import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[float], None]


class MetadataError(ServiceError):
    """Metadata could not be read from the file."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("code", "METADATA_ERROR")
        super().__init__(message, ErrorCategory.UPLOAD, **kwargs)


def _parse_rate(value: str | None) -> float | None:
    """Parse ffprobe rationals like '30000/1001'."""
    if not value:
        return None
    try:
        if "/" in value:
            num, den = value.split("/", 1)
            return round(float(num) / float(den), 3) if float(den) else None
        return float(value)
    except ValueError:
        return None


def _int_or_none(value: Any) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _float_or_none(value: Any) -> float | None:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def parse_ffprobe_output(probe: dict[str, Any], full: bool = True) -> VideoMetadata:
    """Build VideoMetadata from ``ffprobe -print_format json`` output."""
    fmt = probe.get("format") or {}
    streams = probe.get("streams") or []
    video = next((s for s in streams if s.get("codec_type") == "video"), None)
    audio = next((s for s in streams if s.get("codec_type") == "audio"), None)

    duration = _float_or_none(fmt.get("duration"))
    if duration is None and video:
        duration = _float_or_none(video.get("duration"))

    resolution = None
    if video and video.get("width") and video.get("height"):
        resolution = Resolution(width=int(video["width"]), height=int(video["height"]))

    metadata = VideoMetadata(
        duration=duration,
        resolution=resolution,
        file_size=_int_or_none(fmt.get("size")),
    )
    if not full:
        return metadata

    metadata.format = fmt.get("format_name")
    metadata.bit_rate = _int_or_none(fmt.get("bit_rate"))
    if video:
        metadata.codec = video.get("codec_name")
        metadata.frame_rate = _parse_rate(video.get("avg_frame_rate")) or _parse_rate(
            video.get("r_frame_rate")
        )
    if audio:
        metadata.audio = AudioInfo(
            codec=audio.get("codec_name"),
            channels=_int_or_none(audio.get("channels")),
            sample_rate=_int_or_none(audio.get("sample_rate")),
            bit_rate=_int_or_none(audio.get("bit_rate")),
        )
    return metadata


class MetadataExtractor(ABC):
    """Reads technical metadata from a local video file.

    Implementations:
    - FFprobeMetadataExtractor: Runs the ffprobe binary
    - StubMetadataExtractor: Returns fixed values for testing
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def extract_basic(self, path: Path) -> VideoMetadata:
        """Quick probe: duration and resolution only."""
        ...

    @abstractmethod
    async def extract_full(
        self, path: Path, on_progress: ProgressCallback | None = None
    ) -> VideoMetadata:
        """Full probe: codec, frame rate, bit rate and audio details."""
        ...


class FFprobeMetadataExtractor(MetadataExtractor):
    """Metadata extraction using the ffprobe command-line tool."""

    def __init__(self, ffprobe_path: str | None = None, timeout: int | None = None) -> None:
        self.ffprobe_path = ffprobe_path or settings.ffprobe_path or "ffprobe"
        self.timeout = timeout or settings.ffprobe_timeout

    @property
    def name(self) -> str:
        return "ffprobe"

    def _probe(self, path: Path, full: bool) -> dict[str, Any]:
        entries = ["-show_format", "-show_streams"]
        if not full:
            entries = [
                "-show_entries",
                "format=duration,size:stream=codec_type,width,height,duration",
            ]
        cmd = [
            self.ffprobe_path,
            "-v",
            "error",
            "-print_format",
            "json",
            *entries,
            str(path),
        ]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise MetadataError(
                f"ffprobe not found at '{self.ffprobe_path}'", recoverable=False
            ) from e
        except subprocess.TimeoutExpired as e:
            raise MetadataError("Metadata extraction timed out") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()[:300]
            message = stderr or "ffprobe failed"
            raise MetadataError(f"Could not read video metadata: {message}") from e

        try:
            return json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise MetadataError("ffprobe returned unreadable output") from e

    async def extract_basic(self, path: Path) -> VideoMetadata:
        probe = await asyncio.to_thread(self._probe, path, False)
        metadata = parse_ffprobe_output(probe, full=False)
        logger.debug(
            "basic_metadata_extracted",
            path=str(path),
            duration=metadata.duration,
        )
        return metadata

    async def extract_full(
        self, path: Path, on_progress: ProgressCallback | None = None
    ) -> VideoMetadata:
        if on_progress:
            on_progress(0.0)
        probe = await asyncio.to_thread(self._probe, path, True)
        if on_progress:
            on_progress(0.5)
        metadata = parse_ffprobe_output(probe, full=True)
        if on_progress:
            on_progress(1.0)

        logger.info(
            "full_metadata_extracted",
            path=str(path),
            duration=metadata.duration,
            codec=metadata.codec,
            frame_rate=metadata.frame_rate,
        )
        return metadata


class StubMetadataExtractor(MetadataExtractor):
    """Returns a fixed 1080p, two-minute video description."""

    def __init__(self, fail_full: bool = False) -> None:
        self.fail_full = fail_full

    @property
    def name(self) -> str:
        return "stub"

    async def extract_basic(self, path: Path) -> VideoMetadata:
        size = path.stat().st_size if path.exists() else None
        return VideoMetadata(
            duration=120.0,
            resolution=Resolution(width=1920, height=1080),
            file_size=size,
        )

    async def extract_full(
        self, path: Path, on_progress: ProgressCallback | None = None
    ) -> VideoMetadata:
        if on_progress:
            on_progress(0.0)
        if self.fail_full:
            raise MetadataError("Could not read video metadata: stub failure")
        metadata = await self.extract_basic(path)
        metadata.frame_rate = 30.0
        metadata.bit_rate = 5_000_000
        metadata.codec = "h264"
        metadata.format = "mov,mp4,m4a,3gp,3g2,mj2"
        metadata.audio = AudioInfo(codec="aac", channels=2, sample_rate=48000, bit_rate=128000)
        if on_progress:
            on_progress(1.0)
        return metadata


def get_metadata_extractor() -> MetadataExtractor:
    """Get the configured metadata extractor."""
    if settings.metadata_provider.lower() == "stub":
        return StubMetadataExtractor()
    return FFprobeMetadataExtractor()
