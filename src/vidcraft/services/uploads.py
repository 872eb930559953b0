"""Single-use upload slots.

A client first asks for an upload URL, then sends the raw bytes to it. Each
token accepts exactly one upload before it expires.
"""

import secrets
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from vidcraft.config import settings
from vidcraft.db.models import UploadSlotModel
from vidcraft.errors import NotFoundError, UploadError
from vidcraft.logging import get_logger
from vidcraft.services.storage import StoredAsset, StorageService

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class UploadSlotService:
    def __init__(self, session: Session, storage: StorageService | None = None) -> None:
        self.session = session
        self.storage = storage or StorageService()

    def create_slot(self, user_id: str, content_type: str | None = None) -> UploadSlotModel:
        slot = UploadSlotModel(
            token=secrets.token_urlsafe(24),
            user_id=user_id,
            content_type=content_type,
            expires_at=datetime.now(UTC) + timedelta(seconds=settings.upload_slot_ttl_seconds),
        )
        self.session.add(slot)
        self.session.flush()
        logger.info("upload_slot_created", user_id=user_id, content_type=content_type)
        return slot

    def consume(self, token: str, data: bytes, content_type: str | None) -> StoredAsset:
        """Store ``data`` against a slot and mark it used.

        Raises:
            NotFoundError: If the token is unknown
            UploadError: If the slot is used, expired, or the body is empty or too large
        """
        slot = self.session.execute(
            select(UploadSlotModel).where(UploadSlotModel.token == token)
        ).scalar_one_or_none()
        if slot is None:
            raise NotFoundError("Upload URL not found")
        if slot.used_at is not None:
            raise UploadError(
                "Upload URL has already been used", status_code=409, retryable=False
            )
        if _as_utc(slot.expires_at) < datetime.now(UTC):
            raise UploadError("Upload URL has expired", status_code=410, retryable=False)
        if not data:
            raise UploadError("Upload failed: empty request body")

        max_bytes = settings.max_upload_size_mb * 1024 * 1024
        if len(data) > max_bytes:
            raise UploadError(
                f"File size ({len(data) / 1024 / 1024:.1f}MB) exceeds maximum of "
                f"{settings.max_upload_size_mb}MB",
                status_code=413,
            )

        mime_type = content_type or slot.content_type or "application/octet-stream"
        kind = "audio" if mime_type.startswith("audio/") else "video"
        asset = self.storage.store_bytes(data, mime_type=mime_type, kind=kind)

        slot.used_at = datetime.now(UTC)
        slot.storage_id = asset.id
        self.session.flush()

        logger.info("upload_completed", storage_id=asset.id, file_size=asset.file_size_bytes)
        return asset
