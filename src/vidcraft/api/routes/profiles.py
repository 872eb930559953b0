"""Creator profile endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from vidcraft.api.deps import UserIdDep
from vidcraft.db.models import ProfileModel
from vidcraft.db.session import get_session_context
from vidcraft.errors import NotFoundError
from vidcraft.services.profiles import ProfileService

router = APIRouter(prefix="/profile", tags=["Profile"])


class ProfileRequest(BaseModel):
    """Channel details used to tailor generated content."""

    channel_name: str = ""
    content_type: str = ""
    niche: str = ""
    tone: str | None = None
    target_audience: str | None = None
    links: list[str] = Field(default_factory=list)


class ProfileResponse(ProfileRequest):
    user_id: str


def _model_to_response(profile: ProfileModel) -> ProfileResponse:
    return ProfileResponse(
        user_id=profile.user_id,
        channel_name=profile.channel_name,
        content_type=profile.content_type,
        niche=profile.niche,
        tone=profile.tone,
        target_audience=profile.target_audience,
        links=profile.links or [],
    )


@router.get("", response_model=ProfileResponse, summary="Get profile")
async def get_profile(user_id: UserIdDep) -> ProfileResponse:
    with get_session_context() as session:
        profile = ProfileService(session).get(user_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return _model_to_response(profile)


@router.put(
    "",
    response_model=ProfileResponse,
    summary="Save profile",
    description="Create or replace the caller's profile.",
)
async def save_profile(request: ProfileRequest, user_id: UserIdDep) -> ProfileResponse:
    with get_session_context() as session:
        profile = ProfileService(session).upsert(
            user_id,
            request.channel_name,
            request.content_type,
            request.niche,
            tone=request.tone,
            target_audience=request.target_audience,
            links=request.links,
        )
        return _model_to_response(profile)
