"""Creator profiles (one per user)."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from vidcraft.db.models import ProfileModel
from vidcraft.domain.models import ProfileData
from vidcraft.errors import ValidationError
from vidcraft.logging import get_logger

logger = get_logger(__name__)


class ProfileService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> ProfileModel | None:
        return self.session.execute(
            select(ProfileModel).where(ProfileModel.user_id == user_id)
        ).scalar_one_or_none()

    def upsert(
        self,
        user_id: str,
        channel_name: str,
        content_type: str,
        niche: str,
        tone: str | None = None,
        target_audience: str | None = None,
        links: list[str] | None = None,
    ) -> ProfileModel:
        """Create the user's profile or overwrite the existing one."""
        if not (channel_name and content_type and niche):
            raise ValidationError("Profile must include channel name, content type, and niche")

        profile = self.get(user_id)
        created = profile is None
        if profile is None:
            profile = ProfileModel(user_id=user_id)
            self.session.add(profile)

        profile.channel_name = channel_name
        profile.content_type = content_type
        profile.niche = niche
        profile.tone = tone
        profile.target_audience = target_audience
        profile.links = links or []
        self.session.flush()

        logger.info("profile_saved", user_id=user_id, created=created)
        return profile

    @staticmethod
    def to_profile_data(profile: ProfileModel) -> ProfileData:
        return ProfileData(
            channel_name=profile.channel_name,
            content_type=profile.content_type,
            niche=profile.niche,
            tone=profile.tone,
            target_audience=profile.target_audience,
        )
