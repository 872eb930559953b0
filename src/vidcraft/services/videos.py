"""Video records."""

from dataclasses import asdict
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from vidcraft.db.models import VideoModel
from vidcraft.domain.enums import TranscriptionStatus
from vidcraft.domain.models import AudioInfo, Resolution, VideoMetadata
from vidcraft.logging import get_logger
from vidcraft.services.projects import ProjectService, get_owned

logger = get_logger(__name__)


def apply_metadata(video: VideoModel, metadata: VideoMetadata) -> None:
    """Copy the known fields of ``metadata`` onto the record."""
    if metadata.duration is not None:
        video.duration = metadata.duration
    if metadata.resolution is not None:
        video.width = metadata.resolution.width
        video.height = metadata.resolution.height
    if metadata.frame_rate is not None:
        video.frame_rate = metadata.frame_rate
    if metadata.bit_rate is not None:
        video.bit_rate = metadata.bit_rate
    if metadata.codec is not None:
        video.codec = metadata.codec
    if metadata.format is not None:
        video.format = metadata.format
    if metadata.file_size is not None:
        video.file_size = metadata.file_size
    if metadata.mime_type is not None:
        video.mime_type = metadata.mime_type
    if metadata.audio is not None:
        video.audio_info = asdict(metadata.audio)


def metadata_of(video: VideoModel) -> VideoMetadata:
    resolution = None
    if video.width and video.height:
        resolution = Resolution(width=video.width, height=video.height)
    return VideoMetadata(
        duration=video.duration,
        resolution=resolution,
        frame_rate=video.frame_rate,
        bit_rate=video.bit_rate,
        codec=video.codec,
        format=video.format,
        file_size=video.file_size,
        mime_type=video.mime_type,
        audio=AudioInfo(**video.audio_info) if video.audio_info else None,
    )


class VideoService:
    """Create, read, update and delete video records."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.projects = ProjectService(session)

    def get(self, video_id: str | UUID, user_id: str | None) -> VideoModel:
        return get_owned(self.session, VideoModel, video_id, user_id, "Video")

    def create(
        self,
        user_id: str,
        project_id: str | UUID,
        title: str,
        *,
        storage_id: str | None = None,
        video_url: str | None = None,
        file_name: str | None = None,
        file_size: int | None = None,
        mime_type: str | None = None,
        canvas_x: float = 0.0,
        canvas_y: float = 0.0,
        metadata: VideoMetadata | None = None,
    ) -> VideoModel:
        project = self.projects.get(project_id, user_id)
        video = VideoModel(
            project_id=project.id,
            user_id=user_id,
            title=title,
            storage_id=storage_id,
            video_url=video_url,
            file_name=file_name,
            file_size=file_size,
            mime_type=mime_type,
            canvas_x=canvas_x,
            canvas_y=canvas_y,
            transcription_status=TranscriptionStatus.IDLE,
        )
        if metadata is not None:
            apply_metadata(video, metadata)
        self.session.add(video)
        self.session.flush()
        self.projects.refresh_stats(project)

        logger.info(
            "video_created",
            video_id=str(video.id),
            project_id=str(project.id),
            storage_id=storage_id,
        )
        return video

    def list_for_project(self, project_id: str | UUID, user_id: str) -> list[VideoModel]:
        project = self.projects.get(project_id, user_id)
        query = (
            select(VideoModel)
            .where(VideoModel.project_id == project.id)
            .order_by(VideoModel.created_at)
        )
        return list(self.session.execute(query).scalars().all())

    def update(
        self,
        video_id: str | UUID,
        user_id: str,
        *,
        title: str | None = None,
        canvas_x: float | None = None,
        canvas_y: float | None = None,
    ) -> VideoModel:
        video = self.get(video_id, user_id)
        if title is not None:
            video.title = title
        if canvas_x is not None:
            video.canvas_x = canvas_x
        if canvas_y is not None:
            video.canvas_y = canvas_y
        self.session.flush()
        return video

    def update_metadata(
        self, video_id: str | UUID, user_id: str | None, metadata: VideoMetadata
    ) -> VideoModel:
        video = self.get(video_id, user_id)
        apply_metadata(video, metadata)
        self.session.flush()
        logger.info(
            "video_metadata_updated",
            video_id=str(video.id),
            duration=metadata.duration,
            codec=metadata.codec,
        )
        return video

    def delete(self, video_id: str | UUID, user_id: str) -> None:
        """Delete a video and its agents."""
        video = self.get(video_id, user_id)
        project = video.project
        self.session.delete(video)
        self.session.flush()
        self.projects.refresh_stats(project)
        logger.info("video_deleted", video_id=str(video_id))
