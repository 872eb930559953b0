"""Application services."""

from vidcraft.services.agents import AgentService
from vidcraft.services.canvas import CanvasStateRepository, CanvasStore
from vidcraft.services.generation import ContentGenerator, GenerationBatch
from vidcraft.services.profiles import ProfileService
from vidcraft.services.projects import ProjectService
from vidcraft.services.refinement import ContentRefiner, RefinementResult
from vidcraft.services.shares import ShareService
from vidcraft.services.storage import StorageService, StoredAsset
from vidcraft.services.transcription import TranscriptionJobManager
from vidcraft.services.uploads import UploadSlotService
from vidcraft.services.videos import VideoService

__all__ = [
    "AgentService",
    "CanvasStateRepository",
    "CanvasStore",
    "ContentGenerator",
    "ContentRefiner",
    "GenerationBatch",
    "ProfileService",
    "ProjectService",
    "RefinementResult",
    "ShareService",
    "StorageService",
    "StoredAsset",
    "TranscriptionJobManager",
    "UploadSlotService",
    "VideoService",
]
