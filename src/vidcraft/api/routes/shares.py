"""Share endpoints: owner management and public read-only access."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from vidcraft.api.deps import UserIdDep
from vidcraft.db.models import ShareModel
from vidcraft.db.session import get_session_context
from vidcraft.domain.canvas import CanvasSnapshot
from vidcraft.services.shares import ShareService, share_url

router = APIRouter(tags=["Shares"])


class CreateShareRequest(BaseModel):
    canvas_state: CanvasSnapshot


class ShareResponse(BaseModel):
    """Owner view of a share."""

    share_id: str
    project_id: str
    share_url: str
    view_count: int
    canvas_state: dict[str, Any]
    created_at: datetime
    updated_at: datetime | None


class PublicShareResponse(BaseModel):
    """What an anonymous viewer sees."""

    share_id: str
    project_title: str
    canvas_state: dict[str, Any]
    view_count: int
    created_at: datetime


class ViewCountResponse(BaseModel):
    view_count: int


def _model_to_response(share: ShareModel) -> ShareResponse:
    return ShareResponse(
        share_id=share.share_id,
        project_id=str(share.project_id),
        share_url=share_url(share.share_id),
        view_count=share.view_count,
        canvas_state=share.canvas_state,
        created_at=share.created_at,
        updated_at=share.updated_at,
    )


@router.post(
    "/projects/{project_id}/shares",
    response_model=ShareResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Share project",
    description="Snapshot the given canvas under a new public share token. Owner only.",
)
async def create_share(
    project_id: str, request: CreateShareRequest, user_id: UserIdDep
) -> ShareResponse:
    with get_session_context() as session:
        share = ShareService(session).create_share(user_id, project_id, request.canvas_state)
        return _model_to_response(share)


@router.get(
    "/projects/{project_id}/shares",
    response_model=list[ShareResponse],
    summary="List project shares",
)
async def list_project_shares(project_id: str, user_id: UserIdDep) -> list[ShareResponse]:
    with get_session_context() as session:
        shares = ShareService(session).list_shares(user_id, project_id)
        return [_model_to_response(s) for s in shares]


@router.get(
    "/shares",
    response_model=list[ShareResponse],
    summary="List my shares",
)
async def list_shares(user_id: UserIdDep) -> list[ShareResponse]:
    with get_session_context() as session:
        return [_model_to_response(s) for s in ShareService(session).list_shares(user_id)]


@router.get(
    "/shares/{share_id}",
    response_model=PublicShareResponse,
    summary="View share",
    description="Public, unauthenticated. Does not count a view.",
)
async def get_share(share_id: str) -> PublicShareResponse:
    with get_session_context() as session:
        return PublicShareResponse(**ShareService(session).get_public_share(share_id))


@router.post(
    "/shares/{share_id}/views",
    response_model=ViewCountResponse,
    summary="Count share view",
    description="Public, unauthenticated. Increments the view count atomically.",
)
async def count_share_view(share_id: str) -> ViewCountResponse:
    with get_session_context() as session:
        return ViewCountResponse(view_count=ShareService(session).increment_view_count(share_id))


@router.put(
    "/shares/{share_id}",
    response_model=ShareResponse,
    summary="Update share",
    description="Replace the shared snapshot. The token and view count are kept.",
)
async def update_share(
    share_id: str, request: CreateShareRequest, user_id: UserIdDep
) -> ShareResponse:
    with get_session_context() as session:
        share = ShareService(session).update_share(share_id, user_id, request.canvas_state)
        return _model_to_response(share)


@router.delete(
    "/shares/{share_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete share",
)
async def delete_share(share_id: str, user_id: UserIdDep) -> Response:
    with get_session_context() as session:
        ShareService(session).delete_share(share_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
