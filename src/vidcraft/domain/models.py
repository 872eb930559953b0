"""Domain models - pure Python classes independent of database."""

from dataclasses import asdict, dataclass, field
from typing import Any

from vidcraft.domain.enums import AgentType


@dataclass
class Resolution:
    width: int
    height: int


@dataclass
class AudioInfo:
    codec: str | None = None
    channels: int | None = None
    sample_rate: int | None = None
    bit_rate: int | None = None


@dataclass
class VideoMetadata:
    """Technical properties of an uploaded video."""

    duration: float | None = None
    resolution: Resolution | None = None
    frame_rate: float | None = None
    bit_rate: int | None = None
    codec: str | None = None
    format: str | None = None
    file_size: int | None = None
    mime_type: str | None = None
    audio: AudioInfo | None = None

    @property
    def has_basic_info(self) -> bool:
        return self.duration is not None or self.resolution is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, dropping unset fields."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VideoMetadata":
        resolution = data.get("resolution")
        audio = data.get("audio")
        return cls(
            duration=data.get("duration"),
            resolution=Resolution(**resolution) if resolution else None,
            frame_rate=data.get("frame_rate"),
            bit_rate=data.get("bit_rate"),
            codec=data.get("codec"),
            format=data.get("format"),
            file_size=data.get("file_size"),
            mime_type=data.get("mime_type"),
            audio=AudioInfo(**audio) if audio else None,
        )


@dataclass
class ValidationResult:
    """Outcome of an input check that never raises."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class ManualTranscription:
    """Transcript supplied by the creator (e.g. an uploaded .srt)."""

    file_name: str
    text: str
    format: str = "txt"


@dataclass
class VideoData:
    """Video context fed into generation."""

    title: str | None = None
    transcription: str | None = None
    manual_transcriptions: list[ManualTranscription] = field(default_factory=list)
    duration: float | None = None
    resolution: Resolution | None = None
    format: str | None = None


@dataclass
class ConnectedOutput:
    """Draft of an upstream agent node."""

    type: str
    content: str


@dataclass
class MoodBoardRef:
    url: str
    type: str = "link"
    title: str | None = None


@dataclass
class ProfileData:
    """Creator channel information."""

    channel_name: str
    content_type: str
    niche: str
    tone: str | None = None
    target_audience: str | None = None


@dataclass
class VideoFrame:
    """A still captured from the video as a data URL."""

    data_url: str
    timestamp: float


@dataclass
class GenerationRequest:
    """Everything needed to produce one agent draft."""

    agent_type: AgentType | str
    video_data: VideoData = field(default_factory=VideoData)
    connected_outputs: list[ConnectedOutput] = field(default_factory=list)
    mood_board_references: list[MoodBoardRef] = field(default_factory=list)
    profile: ProfileData | None = None
    video_frames: list[VideoFrame] = field(default_factory=list)
    additional_context: str | None = None


@dataclass
class GenerationResult:
    """Generated draft and the prompt that produced it."""

    content: str
    prompt: str
    image_url: str | None = None
    concept: str | None = None
    model: str | None = None


@dataclass
class BatchItemResult:
    """Per-request outcome of a batch generation."""

    type: str
    result: GenerationResult
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


def default_project_settings() -> dict[str, Any]:
    """Initial settings for a new project."""
    return {
        "ai_settings": {
            "default_model": "gpt-4o-mini",
            "temperature": 0.7,
            "auto_generate": False,
        },
        "canvas_settings": {
            "snap_to_grid": True,
            "show_minimap": True,
            "enable_edge_animations": True,
        },
        "video_settings": {
            "auto_transcribe": True,
            "transcription_provider": None,
        },
        "export_settings": {
            "format": "markdown",
            "include_thumbnails": True,
        },
        "notifications": {
            "generation_complete": True,
            "transcription_complete": True,
        },
    }
