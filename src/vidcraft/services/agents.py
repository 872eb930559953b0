"""Agent records: drafts, connections and chat history."""

import time
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from vidcraft.db.models import AgentModel
from vidcraft.domain.enums import AgentStatus, AgentType, ChatRole
from vidcraft.errors import ValidationError
from vidcraft.logging import get_logger
from vidcraft.services.projects import get_owned, parse_uuid
from vidcraft.services.videos import VideoService

logger = get_logger(__name__)


def parse_agent_type(value: str) -> AgentType:
    try:
        return AgentType(value)
    except ValueError:
        raise ValidationError(f"Invalid agent type: {value}") from None


class AgentService:
    """CRUD for agents. Every agent belongs to one video in one project."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.videos = VideoService(session)

    def get(self, agent_id: str | UUID, user_id: str | None) -> AgentModel:
        return get_owned(self.session, AgentModel, agent_id, user_id, "Agent")

    def create(
        self,
        user_id: str,
        video_id: str | UUID,
        agent_type: str,
        *,
        project_id: str | UUID | None = None,
        canvas_x: float = 0.0,
        canvas_y: float = 0.0,
    ) -> AgentModel:
        """Create an idle agent with an empty draft for a video.

        Raises:
            ValidationError: If the type is unknown or the video is in another project
        """
        kind = parse_agent_type(agent_type)
        video = self.videos.get(video_id, user_id)
        if project_id is not None and video.project_id != parse_uuid(project_id, "project ID"):
            raise ValidationError("Video must belong to the project")

        agent = AgentModel(
            video_id=video.id,
            project_id=video.project_id,
            user_id=user_id,
            type=kind,
            draft="",
            status=AgentStatus.IDLE,
            connections=[],
            chat_history=[],
            canvas_x=canvas_x,
            canvas_y=canvas_y,
        )
        self.session.add(agent)
        self.session.flush()
        self.videos.projects.refresh_stats(video.project)

        logger.info("agent_created", agent_id=str(agent.id), type=str(kind), video_id=str(video.id))
        return agent

    def list_for_video(self, video_id: str | UUID, user_id: str) -> list[AgentModel]:
        video = self.videos.get(video_id, user_id)
        query = (
            select(AgentModel)
            .where(AgentModel.video_id == video.id)
            .order_by(AgentModel.created_at)
        )
        return list(self.session.execute(query).scalars().all())

    def list_for_project(self, project_id: str | UUID, user_id: str) -> list[AgentModel]:
        project = self.videos.projects.get(project_id, user_id)
        query = (
            select(AgentModel)
            .where(AgentModel.project_id == project.id)
            .order_by(AgentModel.created_at)
        )
        return list(self.session.execute(query).scalars().all())

    def update_draft(
        self,
        agent_id: str | UUID,
        user_id: str | None,
        draft: str,
        status: AgentStatus = AgentStatus.READY,
        thumbnail_url: str | None = None,
    ) -> AgentModel:
        agent = self.get(agent_id, user_id)
        agent.draft = draft
        agent.status = status
        if status is not AgentStatus.ERROR:
            agent.error_message = None
        if thumbnail_url is not None:
            agent.thumbnail_url = thumbnail_url
        self.session.flush()
        return agent

    def set_status(
        self, agent: AgentModel, status: AgentStatus, error_message: str | None = None
    ) -> None:
        agent.status = status
        agent.error_message = error_message
        self.session.flush()

    def update_connections(
        self, agent_id: str | UUID, user_id: str, connections: list[str]
    ) -> AgentModel:
        agent = self.get(agent_id, user_id)
        agent.connections = list(dict.fromkeys(connections))
        self.session.flush()
        return agent

    def add_chat_message(
        self, agent_id: str | UUID, user_id: str | None, role: ChatRole, message: str
    ) -> dict[str, Any]:
        agent = self.get(agent_id, user_id)
        entry = {
            "role": str(role),
            "message": message,
            "timestamp": int(time.time() * 1000),
        }
        # Reassign so the JSON column is marked dirty
        agent.chat_history = [*(agent.chat_history or []), entry]
        self.session.flush()
        return entry

    def update_position(
        self, agent_id: str | UUID, user_id: str, x: float, y: float
    ) -> AgentModel:
        agent = self.get(agent_id, user_id)
        agent.canvas_x = x
        agent.canvas_y = y
        self.session.flush()
        return agent

    def delete(self, agent_id: str | UUID, user_id: str) -> None:
        agent = self.get(agent_id, user_id)
        project = agent.project
        self.session.delete(agent)
        self.session.flush()
        self.videos.projects.refresh_stats(project)
        logger.info("agent_deleted", agent_id=str(agent_id))
