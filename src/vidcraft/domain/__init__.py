"""Domain models and enumerations."""

from vidcraft.domain.canvas import (
    AgentNode,
    CanvasEdge,
    CanvasNode,
    CanvasSnapshot,
    MoodBoardNode,
    Position,
    TranscriptionNode,
    VideoNode,
    Viewport,
)
from vidcraft.domain.enums import (
    AgentStatus,
    AgentType,
    BatchStatus,
    ChatRole,
    NodeType,
    ProjectStatus,
    TranscriptionStatus,
)
from vidcraft.domain.models import (
    BatchItemResult,
    ConnectedOutput,
    GenerationRequest,
    GenerationResult,
    ManualTranscription,
    MoodBoardRef,
    ProfileData,
    ValidationResult,
    VideoData,
    VideoFrame,
    VideoMetadata,
)

__all__ = [
    # Enums
    "AgentStatus",
    "AgentType",
    "BatchStatus",
    "ChatRole",
    "NodeType",
    "ProjectStatus",
    "TranscriptionStatus",
    # Canvas
    "AgentNode",
    "CanvasEdge",
    "CanvasNode",
    "CanvasSnapshot",
    "MoodBoardNode",
    "Position",
    "TranscriptionNode",
    "VideoNode",
    "Viewport",
    # Models
    "BatchItemResult",
    "ConnectedOutput",
    "GenerationRequest",
    "GenerationResult",
    "ManualTranscription",
    "MoodBoardRef",
    "ProfileData",
    "ValidationResult",
    "VideoData",
    "VideoFrame",
    "VideoMetadata",
]
