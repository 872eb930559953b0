"""Database layer."""

from vidcraft.db.models import (
    AgentModel,
    ArticleModel,
    Base,
    CanvasStateModel,
    ProfileModel,
    ProjectModel,
    ShareModel,
    UploadSlotModel,
    VideoModel,
)
from vidcraft.db.session import check_database, get_session_context, init_db

__all__ = [
    "Base",
    "check_database",
    "get_session_context",
    "init_db",
    # Models
    "AgentModel",
    "ArticleModel",
    "CanvasStateModel",
    "ProfileModel",
    "ProjectModel",
    "ShareModel",
    "UploadSlotModel",
    "VideoModel",
]
