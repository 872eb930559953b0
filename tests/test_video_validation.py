"""Tests for client-side video validation."""

from pathlib import Path

from vidcraft.client.video import MAX_VIDEO_SIZE_BYTES, VideoFile, validate_video_file


def make_file(
    name: str = "clip.mp4", size: int = 1024, mime_type: str = "video/mp4"
) -> VideoFile:
    return VideoFile(path=Path(name), name=name, size=size, mime_type=mime_type)


def test_valid_file() -> None:
    result = validate_video_file(make_file())

    assert result.is_valid is True
    assert result.errors == []


def test_size_limit_is_inclusive() -> None:
    assert validate_video_file(make_file(size=MAX_VIDEO_SIZE_BYTES)).is_valid is True


def test_oversized_file() -> None:
    result = validate_video_file(make_file(size=150 * 1024 * 1024))

    assert result.is_valid is False
    assert result.errors == ["File size (150.0MB) exceeds maximum of 100MB"]


def test_unsupported_type() -> None:
    result = validate_video_file(make_file(name="clip.mkv", mime_type="video/x-matroska"))

    assert result.errors == [
        "File type video/x-matroska is not supported. Use MP4, MOV, AVI, or WebM"
    ]


def test_errors_are_reported_in_order() -> None:
    result = validate_video_file(
        make_file(name="", size=200 * 1024 * 1024, mime_type="image/png")
    )

    assert result.is_valid is False
    assert len(result.errors) == 3
    assert result.errors[0].startswith("File size")
    assert result.errors[1].startswith("File type")
    assert result.errors[2] == "File must have a valid name"


def test_from_path_detects_mime(tmp_path: Path) -> None:
    path = tmp_path / "Interview.MOV"
    path.write_bytes(b"\x00" * 64)

    video = VideoFile.from_path(path)

    assert video.name == "Interview.MOV"
    assert video.size == 64
    assert video.mime_type == "video/quicktime"
    assert validate_video_file(video).is_valid is True
