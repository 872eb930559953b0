"""Project management endpoints."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel, Field

from vidcraft.api.deps import UserIdDep
from vidcraft.db.models import ProjectModel
from vidcraft.db.session import get_session_context
from vidcraft.domain.enums import ProjectStatus
from vidcraft.logging import get_logger
from vidcraft.services.projects import ProjectService

router = APIRouter(prefix="/projects", tags=["Projects"])
logger = get_logger(__name__)


class CreateProjectRequest(BaseModel):
    """Request to create a project."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    tags: list[str] = Field(default_factory=list)
    category: str | None = Field(None, max_length=100)
    settings: dict[str, Any] = Field(default_factory=dict)


class UpdateProjectRequest(BaseModel):
    """Request to update a project. Settings are merged per section."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    tags: list[str] | None = None
    category: str | None = Field(None, max_length=100)
    settings: dict[str, Any] | None = None


class ProjectResponse(BaseModel):
    """Project response model."""

    id: str
    title: str
    description: str | None
    settings: dict[str, Any]
    stats: dict[str, Any]
    tags: list[str]
    category: str | None
    status: ProjectStatus
    is_shared: bool
    share_token: str | None
    created_at: datetime
    updated_at: datetime | None


def _model_to_response(project: ProjectModel) -> ProjectResponse:
    """Convert a ProjectModel to ProjectResponse."""
    return ProjectResponse(
        id=str(project.id),
        title=project.title,
        description=project.description,
        settings=project.settings or {},
        stats=project.stats or {},
        tags=project.tags or [],
        category=project.category,
        status=ProjectStatus(project.status),
        is_shared=project.is_shared,
        share_token=project.share_token,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
    description="Create a new project with default settings and empty stats.",
)
async def create_project(request: CreateProjectRequest, user_id: UserIdDep) -> ProjectResponse:
    """Create a new project."""
    with get_session_context() as session:
        project = ProjectService(session).create(
            user_id,
            request.title,
            description=request.description,
            tags=request.tags,
            category=request.category,
            settings=request.settings,
        )
        return _model_to_response(project)


@router.get(
    "",
    response_model=list[ProjectResponse],
    summary="List projects",
    description="List the caller's projects, newest first. Deleted projects are "
    "only returned when explicitly filtered for.",
)
async def list_projects(
    user_id: UserIdDep,
    project_status: ProjectStatus | None = Query(default=None, alias="status"),
) -> list[ProjectResponse]:
    """List the caller's projects."""
    with get_session_context() as session:
        projects = ProjectService(session).list_for_user(user_id, project_status)
        return [_model_to_response(p) for p in projects]


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Get project",
    description="Get a project by ID.",
)
async def get_project(project_id: str, user_id: UserIdDep) -> ProjectResponse:
    with get_session_context() as session:
        return _model_to_response(ProjectService(session).get(project_id, user_id))


@router.put(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Update project",
    description="Update a project's title, description, tags, category or settings.",
)
async def update_project(
    project_id: str, request: UpdateProjectRequest, user_id: UserIdDep
) -> ProjectResponse:
    """Update a project."""
    with get_session_context() as session:
        project = ProjectService(session).update(
            project_id,
            user_id,
            title=request.title,
            description=request.description,
            tags=request.tags,
            category=request.category,
            settings=request.settings,
        )
        logger.info("project_updated", project_id=project_id)
        return _model_to_response(project)


@router.post(
    "/{project_id}/archive",
    response_model=ProjectResponse,
    summary="Archive project",
)
async def archive_project(project_id: str, user_id: UserIdDep) -> ProjectResponse:
    with get_session_context() as session:
        project = ProjectService(session).set_status(project_id, user_id, ProjectStatus.ARCHIVED)
        return _model_to_response(project)


@router.post(
    "/{project_id}/restore",
    response_model=ProjectResponse,
    summary="Restore project",
    description="Return an archived or soft-deleted project to active.",
)
async def restore_project(project_id: str, user_id: UserIdDep) -> ProjectResponse:
    with get_session_context() as session:
        project = ProjectService(session).set_status(project_id, user_id, ProjectStatus.ACTIVE)
        return _model_to_response(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete project",
    description="Soft-delete a project. With permanent=true the project and its "
    "videos, agents, canvas state and shares are removed.",
)
async def delete_project(
    project_id: str,
    user_id: UserIdDep,
    permanent: bool = False,
) -> Response:
    """Delete a project."""
    with get_session_context() as session:
        service = ProjectService(session)
        if permanent:
            service.delete(project_id, user_id)
        else:
            service.set_status(project_id, user_id, ProjectStatus.DELETED)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{project_id}/stats",
    summary="Project stats",
    description="Recount videos and agents and return the project's stats.",
)
async def project_stats(project_id: str, user_id: UserIdDep) -> dict[str, Any]:
    with get_session_context() as session:
        service = ProjectService(session)
        return service.refresh_stats(service.get(project_id, user_id))
