"""Agent endpoints: CRUD, generation and chat refinement."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from vidcraft.api.deps import ContentGeneratorDep, ContentRefinerDep, UserIdDep
from vidcraft.api.routes.generation import (
    GenerateResponse,
    MoodBoardReferenceBody,
    VideoFrameBody,
    result_to_response,
)
from vidcraft.db.models import AgentModel
from vidcraft.db.session import get_session_context
from vidcraft.domain.enums import AgentStatus, AgentType, ChatRole
from vidcraft.domain.models import MoodBoardRef, VideoFrame
from vidcraft.services.agents import AgentService

router = APIRouter(tags=["Agents"])


class CreateAgentRequest(BaseModel):
    """Request to add an agent for a video."""

    video_id: str
    type: str
    canvas_x: float = 0.0
    canvas_y: float = 0.0


class UpdateDraftRequest(BaseModel):
    draft: str
    status: AgentStatus = AgentStatus.READY
    thumbnail_url: str | None = None


class UpdateConnectionsRequest(BaseModel):
    connections: list[str]


class ChatMessageRequest(BaseModel):
    role: ChatRole
    message: str = Field(..., min_length=1)


class PositionRequest(BaseModel):
    x: float
    y: float


class AgentGenerateRequest(BaseModel):
    """Optional inputs that are not stored on the agent."""

    mood_board_references: list[MoodBoardReferenceBody] = Field(default_factory=list)
    video_frames: list[VideoFrameBody] = Field(default_factory=list)


class ThumbnailRequest(BaseModel):
    frames: list[VideoFrameBody] = Field(default_factory=list)


class ThumbnailScheduledResponse(BaseModel):
    scheduled: bool
    scheduled_at: str


class RefineRequest(BaseModel):
    message: str


class RefineResponse(BaseModel):
    response: str
    updated_draft: str


class AgentResponse(BaseModel):
    """Agent response model."""

    id: str
    video_id: str
    project_id: str
    type: AgentType
    draft: str
    thumbnail_url: str | None
    status: AgentStatus
    error_message: str | None
    connections: list[str]
    chat_history: list[dict[str, Any]]
    canvas_x: float
    canvas_y: float
    created_at: datetime
    updated_at: datetime | None


def _model_to_response(agent: AgentModel) -> AgentResponse:
    """Convert an AgentModel to AgentResponse."""
    return AgentResponse(
        id=str(agent.id),
        video_id=str(agent.video_id),
        project_id=str(agent.project_id),
        type=AgentType(agent.type),
        draft=agent.draft or "",
        thumbnail_url=agent.thumbnail_url,
        status=AgentStatus(agent.status),
        error_message=agent.error_message,
        connections=agent.connections or [],
        chat_history=agent.chat_history or [],
        canvas_x=agent.canvas_x,
        canvas_y=agent.canvas_y,
        created_at=agent.created_at,
        updated_at=agent.updated_at,
    )


def _frames(bodies: list[VideoFrameBody]) -> list[VideoFrame]:
    return [VideoFrame(data_url=f.data_url, timestamp=f.timestamp) for f in bodies]


@router.post(
    "/projects/{project_id}/agents",
    response_model=AgentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create agent",
    description="Create an idle agent with an empty draft. The video must belong to the project.",
)
async def create_agent(
    project_id: str, request: CreateAgentRequest, user_id: UserIdDep
) -> AgentResponse:
    with get_session_context() as session:
        agent = AgentService(session).create(
            user_id,
            request.video_id,
            request.type,
            project_id=project_id,
            canvas_x=request.canvas_x,
            canvas_y=request.canvas_y,
        )
        return _model_to_response(agent)


@router.get(
    "/projects/{project_id}/agents",
    response_model=list[AgentResponse],
    summary="List project agents",
)
async def list_project_agents(project_id: str, user_id: UserIdDep) -> list[AgentResponse]:
    with get_session_context() as session:
        agents = AgentService(session).list_for_project(project_id, user_id)
        return [_model_to_response(a) for a in agents]


@router.get(
    "/videos/{video_id}/agents",
    response_model=list[AgentResponse],
    summary="List video agents",
)
async def list_video_agents(video_id: str, user_id: UserIdDep) -> list[AgentResponse]:
    with get_session_context() as session:
        agents = AgentService(session).list_for_video(video_id, user_id)
        return [_model_to_response(a) for a in agents]


@router.get("/agents/{agent_id}", response_model=AgentResponse, summary="Get agent")
async def get_agent(agent_id: str, user_id: UserIdDep) -> AgentResponse:
    with get_session_context() as session:
        return _model_to_response(AgentService(session).get(agent_id, user_id))


@router.put("/agents/{agent_id}/draft", response_model=AgentResponse, summary="Update draft")
async def update_draft(
    agent_id: str, request: UpdateDraftRequest, user_id: UserIdDep
) -> AgentResponse:
    with get_session_context() as session:
        agent = AgentService(session).update_draft(
            agent_id,
            user_id,
            request.draft,
            status=request.status,
            thumbnail_url=request.thumbnail_url,
        )
        return _model_to_response(agent)


@router.put(
    "/agents/{agent_id}/connections",
    response_model=AgentResponse,
    summary="Update connections",
    description="Replace the ids of agents whose drafts feed this agent's prompt.",
)
async def update_connections(
    agent_id: str, request: UpdateConnectionsRequest, user_id: UserIdDep
) -> AgentResponse:
    with get_session_context() as session:
        agent = AgentService(session).update_connections(agent_id, user_id, request.connections)
        return _model_to_response(agent)


@router.post(
    "/agents/{agent_id}/chat",
    status_code=status.HTTP_201_CREATED,
    summary="Add chat message",
)
async def add_chat_message(
    agent_id: str, request: ChatMessageRequest, user_id: UserIdDep
) -> dict[str, Any]:
    with get_session_context() as session:
        return AgentService(session).add_chat_message(
            agent_id, user_id, request.role, request.message
        )


@router.put("/agents/{agent_id}/position", response_model=AgentResponse, summary="Move agent")
async def update_position(
    agent_id: str, request: PositionRequest, user_id: UserIdDep
) -> AgentResponse:
    with get_session_context() as session:
        agent = AgentService(session).update_position(agent_id, user_id, request.x, request.y)
        return _model_to_response(agent)


@router.delete(
    "/agents/{agent_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete agent",
)
async def delete_agent(agent_id: str, user_id: UserIdDep) -> Response:
    with get_session_context() as session:
        AgentService(session).delete(agent_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/agents/{agent_id}/generate",
    response_model=GenerateResponse,
    summary="Generate agent draft",
    description="Generate from the agent's video, profile and connected agents, then store "
    "the draft. On failure the agent is left in the error state.",
)
async def generate_agent(
    agent_id: str,
    user_id: UserIdDep,
    generator: ContentGeneratorDep,
    request: AgentGenerateRequest | None = None,
) -> GenerateResponse:
    request = request or AgentGenerateRequest()
    result = await generator.generate_for_agent(
        agent_id,
        user_id,
        frames=_frames(request.video_frames),
        mood_board_references=[
            MoodBoardRef(url=r.url, type=r.type, title=r.title)
            for r in request.mood_board_references
        ],
    )
    return result_to_response(result)


@router.post(
    "/agents/{agent_id}/thumbnail",
    response_model=ThumbnailScheduledResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Generate thumbnail in background",
    description="Mark a thumbnail agent generating and enqueue the image job.",
)
async def schedule_thumbnail(
    agent_id: str, request: ThumbnailRequest, user_id: UserIdDep, generator: ContentGeneratorDep
) -> ThumbnailScheduledResponse:
    result = await generator.schedule_thumbnail(agent_id, user_id, _frames(request.frames))
    return ThumbnailScheduledResponse(**result)


@router.post(
    "/agents/{agent_id}/refine",
    response_model=RefineResponse,
    summary="Refine draft by chat",
    description="Send a chat message about the draft. The reply is stored, and the draft "
    "is replaced when the reply carries an updated version.",
)
async def refine_agent(
    agent_id: str, request: RefineRequest, user_id: UserIdDep, refiner: ContentRefinerDep
) -> RefineResponse:
    result = await refiner.refine(agent_id, user_id, request.message)
    return RefineResponse(response=result.response, updated_draft=result.updated_draft)
