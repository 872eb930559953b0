"""Domain enumerations."""

from enum import StrEnum


class AgentType(StrEnum):
    """Kinds of content an agent node produces."""

    TITLE = "title"
    DESCRIPTION = "description"
    THUMBNAIL = "thumbnail"
    TWEETS = "tweets"
    BLOG = "blog"
    LINKEDIN = "linkedin"


class AgentStatus(StrEnum):
    """Generation status of an agent's draft."""

    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    ERROR = "error"


class TranscriptionStatus(StrEnum):
    """Status of a video's speech-to-text job."""

    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ProjectStatus(StrEnum):
    """Lifecycle state of a project."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class NodeType(StrEnum):
    """Canvas node kinds."""

    VIDEO = "video"
    AGENT = "agent"
    TRANSCRIPTION = "transcription"
    MOODBOARD = "moodboard"


class ChatRole(StrEnum):
    """Author of a refinement chat message."""

    USER = "user"
    AI = "ai"


class BatchStatus(StrEnum):
    """State of a batch generation run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
