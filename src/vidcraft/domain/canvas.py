"""Canvas graph types.

Nodes are a tagged union on ``type``: each variant carries only the data that
kind of node renders.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from vidcraft.domain.enums import AgentStatus, AgentType, TranscriptionStatus


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class Viewport(BaseModel):
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0


class _NodeData(BaseModel):
    model_config = ConfigDict(extra="allow")


class VideoNodeData(_NodeData):
    title: str = ""
    video_id: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None
    duration: float | None = None
    is_uploading: bool = False
    upload_progress: float | None = None
    is_transcribing: bool = False
    has_transcription: bool = False


class AgentNodeData(_NodeData):
    agent_id: str | None = None
    agent_type: AgentType = AgentType.TITLE
    draft: str = ""
    status: AgentStatus = AgentStatus.IDLE
    thumbnail_url: str | None = None
    connections: list[str] = Field(default_factory=list)


class TranscriptionNodeData(_NodeData):
    video_id: str | None = None
    text: str = ""
    status: TranscriptionStatus = TranscriptionStatus.IDLE
    error: str | None = None


class MoodBoardReference(BaseModel):
    url: str
    type: str = "link"  # youtube, music, image, link
    title: str | None = None


class MoodBoardNodeData(_NodeData):
    references: list[MoodBoardReference] = Field(default_factory=list)


class _BaseNode(BaseModel):
    id: str
    position: Position = Field(default_factory=Position)
    selected: bool = False


class VideoNode(_BaseNode):
    type: Literal["video"] = "video"
    data: VideoNodeData = Field(default_factory=VideoNodeData)


class AgentNode(_BaseNode):
    type: Literal["agent"] = "agent"
    data: AgentNodeData = Field(default_factory=AgentNodeData)


class TranscriptionNode(_BaseNode):
    type: Literal["transcription"] = "transcription"
    data: TranscriptionNodeData = Field(default_factory=TranscriptionNodeData)


class MoodBoardNode(_BaseNode):
    type: Literal["moodboard"] = "moodboard"
    data: MoodBoardNodeData = Field(default_factory=MoodBoardNodeData)


CanvasNode = Annotated[
    VideoNode | AgentNode | TranscriptionNode | MoodBoardNode,
    Field(discriminator="type"),
]


class CanvasEdge(BaseModel):
    id: str
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None
    animated: bool = False


class CanvasSnapshot(BaseModel):
    """Serializable nodes, edges and viewport of one canvas."""

    nodes: list[CanvasNode] = Field(default_factory=list)
    edges: list[CanvasEdge] = Field(default_factory=list)
    viewport: Viewport = Field(default_factory=Viewport)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
