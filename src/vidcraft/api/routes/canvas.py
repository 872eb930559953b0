"""Canvas state endpoints."""

from collections.abc import Callable

from fastapi import APIRouter, Response, status

from vidcraft.api.deps import UserIdDep
from vidcraft.db.session import get_session_context
from vidcraft.domain.canvas import CanvasSnapshot
from vidcraft.logging import get_logger
from vidcraft.services.canvas import CanvasStateRepository, CanvasStore
from vidcraft.services.projects import ProjectService

router = APIRouter(prefix="/projects/{project_id}/canvas", tags=["Canvas"])
logger = get_logger(__name__)


def _apply(
    project_id: str, user_id: str, operation: Callable[[CanvasStore], object]
) -> CanvasSnapshot:
    """Load the saved canvas, run one store operation on it and save the result."""
    with get_session_context() as session:
        project = ProjectService(session).get(project_id, user_id)
        repository = CanvasStateRepository(session)
        store = CanvasStore(repository.get_state(user_id, project.id))
        operation(store)
        snapshot = store.snapshot()
        repository.save_state(user_id, project.id, snapshot)
        return snapshot


@router.get(
    "",
    response_model=CanvasSnapshot,
    summary="Get canvas",
    description="The last saved canvas of the project, or an empty canvas.",
)
async def get_canvas(project_id: str, user_id: UserIdDep) -> CanvasSnapshot:
    with get_session_context() as session:
        project = ProjectService(session).get(project_id, user_id)
        state = CanvasStateRepository(session).get_state(user_id, project.id)
        return state or CanvasSnapshot()


@router.put(
    "",
    response_model=CanvasSnapshot,
    summary="Save canvas",
    description="Replace the saved canvas. The last write wins.",
)
async def save_canvas(
    project_id: str, snapshot: CanvasSnapshot, user_id: UserIdDep
) -> CanvasSnapshot:
    with get_session_context() as session:
        project = ProjectService(session).get(project_id, user_id)
        CanvasStateRepository(session).save_state(user_id, project.id, snapshot)
        ProjectService.touch(project)
    return snapshot


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear canvas",
)
async def clear_canvas(project_id: str, user_id: UserIdDep) -> Response:
    with get_session_context() as session:
        project = ProjectService(session).get(project_id, user_id)
        CanvasStateRepository(session).clear_state(user_id, project.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/arrange",
    response_model=CanvasSnapshot,
    summary="Arrange nodes",
    description="Lay the saved nodes out in rows of three grouped by node type.",
)
async def arrange_canvas(project_id: str, user_id: UserIdDep) -> CanvasSnapshot:
    snapshot = _apply(project_id, user_id, CanvasStore.arrange_nodes)
    logger.info("canvas_arranged", project_id=project_id, nodes=len(snapshot.nodes))
    return snapshot


@router.post(
    "/fit-view",
    response_model=CanvasSnapshot,
    summary="Fit view",
    description="Center and zoom the saved viewport so every node is visible.",
)
async def fit_canvas_view(project_id: str, user_id: UserIdDep) -> CanvasSnapshot:
    return _apply(project_id, user_id, CanvasStore.fit_view)
