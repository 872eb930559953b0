"""Public read-only canvas shares."""

import secrets
import time
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from vidcraft.config import settings
from vidcraft.db.models import ShareModel
from vidcraft.domain.canvas import CanvasSnapshot
from vidcraft.domain.enums import ProjectStatus
from vidcraft.errors import NotFoundError, PermissionDeniedError
from vidcraft.logging import get_logger
from vidcraft.services.projects import ProjectService

logger = get_logger(__name__)


def new_share_id() -> str:
    return f"share_{int(time.time() * 1000)}_{secrets.token_urlsafe(9)}"


def share_url(share_id: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/share/{share_id}"


class ShareService:
    """Creates owner snapshots and serves them publicly by token."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.projects = ProjectService(session)

    def create_share(
        self, user_id: str, project_id: str | UUID, canvas_state: CanvasSnapshot
    ) -> ShareModel:
        """Snapshot the canvas under a new share token. Owner only."""
        project = self.projects.get(project_id, user_id)
        share = ShareModel(
            share_id=new_share_id(),
            project_id=project.id,
            user_id=user_id,
            canvas_state=canvas_state.to_json(),
            view_count=0,
        )
        self.session.add(share)
        project.is_shared = True
        project.share_token = share.share_id
        self.session.flush()

        logger.info("share_created", share_id=share.share_id, project_id=str(project.id))
        return share

    def _get(self, share_id: str) -> ShareModel:
        share = self.session.execute(
            select(ShareModel).where(ShareModel.share_id == share_id)
        ).scalar_one_or_none()
        if share is None:
            raise NotFoundError("Share not found")
        return share

    def _get_visible(self, share_id: str) -> ShareModel:
        # Shares of soft-deleted projects are reported as missing
        share = self._get(share_id)
        project = share.project
        if project is None or project.status == ProjectStatus.DELETED:
            raise NotFoundError("Share not found")
        return share

    def get_public_share(self, share_id: str) -> dict[str, Any]:
        """Shared snapshot for anonymous viewers. Does not count a view."""
        share = self._get_visible(share_id)
        project = share.project
        return {
            "share_id": share.share_id,
            "project_title": project.title,
            "canvas_state": share.canvas_state,
            "view_count": share.view_count,
            "created_at": share.created_at,
        }

    def increment_view_count(self, share_id: str) -> int:
        """Count one view and return the new total.

        The increment is a single UPDATE so concurrent views are not lost.
        """
        self._get_visible(share_id)
        result = self.session.execute(
            update(ShareModel)
            .where(ShareModel.share_id == share_id)
            .values(view_count=ShareModel.view_count + 1)
            .returning(ShareModel.view_count)
        )
        count = result.scalar_one_or_none()
        if count is None:
            raise NotFoundError("Share not found")
        return count

    def list_shares(self, user_id: str, project_id: str | UUID | None = None) -> list[ShareModel]:
        query = select(ShareModel).where(ShareModel.user_id == user_id)
        if project_id is not None:
            project = self.projects.get(project_id, user_id)
            query = query.where(ShareModel.project_id == project.id)
        query = query.order_by(ShareModel.created_at.desc())
        return list(self.session.execute(query).scalars().all())

    def _get_owned(self, share_id: str, user_id: str) -> ShareModel:
        share = self._get(share_id)
        if share.user_id != user_id:
            raise PermissionDeniedError()
        return share

    def update_share(
        self, share_id: str, user_id: str, canvas_state: CanvasSnapshot
    ) -> ShareModel:
        """Replace the shared snapshot. The token and view count are kept."""
        share = self._get_owned(share_id, user_id)
        share.canvas_state = canvas_state.to_json()
        self.session.flush()
        return share

    def delete_share(self, share_id: str, user_id: str) -> None:
        share = self._get_owned(share_id, user_id)
        project = share.project
        self.session.delete(share)
        self.session.flush()

        if project is not None and project.share_token == share_id:
            remaining = self.session.execute(
                select(ShareModel)
                .where(ShareModel.project_id == project.id)
                .order_by(ShareModel.created_at.desc())
            ).scalars().first()
            project.share_token = remaining.share_id if remaining else None
            project.is_shared = remaining is not None
            self.session.flush()

        logger.info("share_deleted", share_id=share_id)
