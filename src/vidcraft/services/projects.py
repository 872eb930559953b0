"""Project records and ownership checks."""

from datetime import UTC, datetime
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vidcraft.db.models import AgentModel, Base, ProjectModel, VideoModel
from vidcraft.domain.enums import ProjectStatus
from vidcraft.domain.models import default_project_settings
from vidcraft.errors import NotFoundError, PermissionDeniedError, ValidationError
from vidcraft.logging import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def parse_uuid(value: str | UUID, label: str = "ID") -> UUID:
    """Parse a path or payload id, rejecting malformed values."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label} format") from None


def get_owned(
    session: Session,
    model: type[ModelT],
    record_id: str | UUID,
    user_id: str | None,
    label: str,
) -> ModelT:
    """Load a record and check it belongs to ``user_id``.

    ``user_id=None`` skips the ownership check (background jobs).

    Raises:
        NotFoundError: If the record does not exist
        PermissionDeniedError: If it belongs to another user
    """
    record = session.get(model, parse_uuid(record_id, f"{label.lower()} ID"))
    if record is None:
        raise NotFoundError(f"{label} not found")
    if user_id is not None and getattr(record, "user_id", None) != user_id:
        raise PermissionDeniedError()
    return record


def _empty_stats() -> dict[str, Any]:
    return {
        "video_count": 0,
        "agent_count": 0,
        "total_generations": 0,
        "last_activity": datetime.now(UTC).isoformat(),
    }


def _merge_settings(current: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    merged = dict(current)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


class ProjectService:
    """CRUD and lifecycle transitions for projects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, project_id: str | UUID, user_id: str | None) -> ProjectModel:
        return get_owned(self.session, ProjectModel, project_id, user_id, "Project")

    def create(
        self,
        user_id: str,
        title: str,
        description: str | None = None,
        tags: list[str] | None = None,
        category: str | None = None,
        settings: dict[str, Any] | None = None,
    ) -> ProjectModel:
        project = ProjectModel(
            user_id=user_id,
            title=title,
            description=description,
            tags=tags or [],
            category=category,
            settings=_merge_settings(default_project_settings(), settings or {}),
            stats=_empty_stats(),
            status=ProjectStatus.ACTIVE,
            is_shared=False,
        )
        self.session.add(project)
        self.session.flush()
        logger.info("project_created", project_id=str(project.id), user_id=user_id)
        return project

    def list_for_user(
        self, user_id: str, status: ProjectStatus | None = None
    ) -> list[ProjectModel]:
        """Projects for a user, newest first.

        Without a status filter, soft-deleted projects are excluded.
        """
        query = select(ProjectModel).where(ProjectModel.user_id == user_id)
        if status is not None:
            query = query.where(ProjectModel.status == status)
        else:
            query = query.where(ProjectModel.status != ProjectStatus.DELETED)
        query = query.order_by(ProjectModel.created_at.desc())
        return list(self.session.execute(query).scalars().all())

    def update(
        self,
        project_id: str | UUID,
        user_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        tags: list[str] | None = None,
        category: str | None = None,
        settings: dict[str, Any] | None = None,
    ) -> ProjectModel:
        project = self.get(project_id, user_id)
        if title is not None:
            project.title = title
        if description is not None:
            project.description = description
        if tags is not None:
            project.tags = tags
        if category is not None:
            project.category = category
        if settings is not None:
            project.settings = _merge_settings(project.settings or {}, settings)
        self.touch(project)
        self.session.flush()
        return project

    def set_status(
        self, project_id: str | UUID, user_id: str, new_status: ProjectStatus
    ) -> ProjectModel:
        """Archive, restore, or soft-delete."""
        project = self.get(project_id, user_id)
        previous = project.status
        project.status = new_status
        self.session.flush()
        logger.info(
            "project_status_changed",
            project_id=str(project.id),
            previous=previous,
            status=str(new_status),
        )
        return project

    def delete(self, project_id: str | UUID, user_id: str) -> None:
        """Remove the project with its videos, agents, canvas state and shares."""
        project = self.get(project_id, user_id)
        self.session.delete(project)
        self.session.flush()
        logger.info("project_deleted", project_id=str(project_id))

    def refresh_stats(self, project: ProjectModel) -> dict[str, Any]:
        """Recount videos and agents into ``project.stats``."""
        video_count = self.session.execute(
            select(func.count()).select_from(VideoModel).where(VideoModel.project_id == project.id)
        ).scalar_one()
        agent_count = self.session.execute(
            select(func.count()).select_from(AgentModel).where(AgentModel.project_id == project.id)
        ).scalar_one()
        stats = {**_empty_stats(), **(project.stats or {})}
        stats["video_count"] = video_count
        stats["agent_count"] = agent_count
        stats["last_activity"] = datetime.now(UTC).isoformat()
        project.stats = stats
        self.session.flush()
        return stats

    def record_generation(self, project_id: UUID) -> None:
        project = self.session.get(ProjectModel, project_id)
        if project is None:
            return
        stats = {**_empty_stats(), **(project.stats or {})}
        stats["total_generations"] = int(stats.get("total_generations", 0)) + 1
        stats["last_activity"] = datetime.now(UTC).isoformat()
        project.stats = stats
        self.session.flush()

    @staticmethod
    def touch(project: ProjectModel) -> None:
        stats = {**_empty_stats(), **(project.stats or {})}
        stats["last_activity"] = datetime.now(UTC).isoformat()
        project.stats = stats
