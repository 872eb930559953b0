"""SQLAlchemy ORM models."""

from datetime import datetime
from typing import Any
from uuid import UUID as PyUUID
from uuid import uuid4

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ProjectModel(Base):
    """Creator project: one workspace holding videos, agents and a canvas."""

    __tablename__ = "projects"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    settings: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    stats: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="active", server_default="active", index=True)
    is_shared: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    share_token: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    # Relationships
    videos: Mapped[list["VideoModel"]] = relationship(
        "VideoModel", back_populates="project", cascade="all, delete-orphan"
    )
    agents: Mapped[list["AgentModel"]] = relationship(
        "AgentModel", back_populates="project", cascade="all, delete-orphan"
    )
    canvas_states: Mapped[list["CanvasStateModel"]] = relationship(
        "CanvasStateModel", back_populates="project", cascade="all, delete-orphan"
    )
    shares: Mapped[list["ShareModel"]] = relationship(
        "ShareModel", back_populates="project", cascade="all, delete-orphan"
    )
    articles: Mapped[list["ArticleModel"]] = relationship(
        "ArticleModel", back_populates="project", cascade="all, delete-orphan"
    )


class VideoModel(Base):
    """Uploaded source video with metadata and transcription state."""

    __tablename__ = "videos"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    project_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    storage_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    file_name: Mapped[str | None] = mapped_column(String(512), nullable=True)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    canvas_x: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    canvas_y: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    # Metadata
    duration: Mapped[float | None] = mapped_column(Float, nullable=True)
    width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    frame_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    bit_rate: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    codec: Mapped[str | None] = mapped_column(String(50), nullable=True)
    format: Mapped[str | None] = mapped_column(String(100), nullable=True)
    audio_info: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    # Transcription
    transcription: Mapped[str | None] = mapped_column(Text, nullable=True)
    transcription_status: Mapped[str] = mapped_column(
        String(20), default="idle", server_default="idle", index=True
    )
    transcription_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    # Relationships
    project: Mapped["ProjectModel"] = relationship("ProjectModel", back_populates="videos")
    agents: Mapped[list["AgentModel"]] = relationship(
        "AgentModel", back_populates="video", cascade="all, delete-orphan"
    )


class AgentModel(Base):
    """AI agent node producing one content artifact for a video."""

    __tablename__ = "agents"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    video_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("videos.id", ondelete="CASCADE"), index=True
    )
    project_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    draft: Mapped[str] = mapped_column(Text, default="", server_default="")
    thumbnail_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="idle", server_default="idle")
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    connections: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    chat_history: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    canvas_x: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    canvas_y: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    # Relationships
    video: Mapped["VideoModel"] = relationship("VideoModel", back_populates="agents")
    project: Mapped["ProjectModel"] = relationship("ProjectModel", back_populates="agents")


class ArticleModel(Base):
    """Text source placed on the canvas; feeds connected agents."""

    __tablename__ = "articles"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    project_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    format: Mapped[str | None] = mapped_column(String(20), nullable=True)  # md, txt
    word_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    file_name: Mapped[str | None] = mapped_column(String(512), nullable=True)
    storage_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    source_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    canvas_x: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    canvas_y: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    project: Mapped["ProjectModel"] = relationship("ProjectModel", back_populates="articles")


class CanvasStateModel(Base):
    """Last saved canvas snapshot, one per user per project."""

    __tablename__ = "canvas_states"
    __table_args__ = (UniqueConstraint("user_id", "project_id", name="uq_canvas_user_project"),)

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    project_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    nodes: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    edges: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    viewport: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    project: Mapped["ProjectModel"] = relationship("ProjectModel", back_populates="canvas_states")


class ShareModel(Base):
    """Public read-only snapshot of a project's canvas."""

    __tablename__ = "shares"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    share_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    project_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    canvas_state: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    project: Mapped["ProjectModel"] = relationship("ProjectModel", back_populates="shares")


class ProfileModel(Base):
    """Creator channel profile used as generation context."""

    __tablename__ = "profiles"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    channel_name: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    niche: Mapped[str] = mapped_column(String(255), nullable=False)
    tone: Mapped[str | None] = mapped_column(String(255), nullable=True)
    target_audience: Mapped[str | None] = mapped_column(Text, nullable=True)
    links: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )


class UploadSlotModel(Base):
    """Single-use upload URL token."""

    __tablename__ = "upload_slots"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    storage_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
