"""File storage service for uploaded videos and generated images."""

import hashlib
import json
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from vidcraft.config import settings
from vidcraft.errors import NotFoundError, StorageError
from vidcraft.logging import get_logger

logger = get_logger(__name__)

_STORAGE_ID_RE = re.compile(r"^[0-9a-f]{32}$")


@dataclass
class StoredAsset:
    """Metadata for a stored file."""

    id: str  # storage id
    file_path: Path
    file_size_bytes: int
    mime_type: str
    checksum: str
    kind: str  # "video", "audio", "thumbnail", ...
    file_name: str | None
    metadata: dict[str, Any]
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "file_size_bytes": self.file_size_bytes,
            "mime_type": self.mime_type,
            "checksum": self.checksum,
            "kind": self.kind,
            "file_name": self.file_name,
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat(),
        }


class StorageService:
    """Local filesystem storage addressed by opaque storage ids.

    Each file lives at ``<base>/files/<id>`` with a JSON sidecar holding its
    content type and checksum, so serving a file never touches the database.
    """

    def __init__(
        self,
        base_path: Path | None = None,
        public_base_url: str | None = None,
        create_dirs: bool = True,
    ) -> None:
        """Initialize storage service.

        Args:
            base_path: Base directory for local storage. Defaults to settings.storage_path
            public_base_url: Origin used to build file URLs
            create_dirs: Whether to create directories if they don't exist
        """
        self.base_path = Path(base_path or settings.storage_path)
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")
        self.files_dir = self.base_path / "files"

        if create_dirs:
            self.files_dir.mkdir(parents=True, exist_ok=True)

    def _compute_checksum(self, data: bytes) -> str:
        """Compute SHA256 checksum of data."""
        return hashlib.sha256(data).hexdigest()

    def _paths(self, storage_id: str) -> tuple[Path, Path]:
        if not _STORAGE_ID_RE.match(storage_id):
            raise NotFoundError("File not found")
        return self.files_dir / storage_id, self.files_dir / f"{storage_id}.json"

    def store_bytes(
        self,
        data: bytes,
        mime_type: str,
        kind: str = "video",
        file_name: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> StoredAsset:
        """Store raw bytes and return the new asset.

        Raises:
            StorageError: If the file cannot be written
        """
        storage_id = uuid4().hex
        file_path, meta_path = self._paths(storage_id)
        asset = StoredAsset(
            id=storage_id,
            file_path=file_path,
            file_size_bytes=len(data),
            mime_type=mime_type,
            checksum=self._compute_checksum(data),
            kind=kind,
            file_name=file_name,
            metadata=metadata or {},
            created_at=datetime.now(UTC),
        )

        try:
            file_path.write_bytes(data)
            meta_path.write_text(json.dumps(asset.to_dict()))
        except OSError as e:
            logger.error("storage_write_failed", storage_id=storage_id, error=str(e))
            raise StorageError(f"Could not store file: {e}") from e

        logger.info(
            "storage_file_stored",
            storage_id=storage_id,
            kind=kind,
            file_size=len(data),
            mime_type=mime_type,
        )
        return asset

    def get_asset(self, storage_id: str) -> StoredAsset:
        """Look up a stored file.

        Raises:
            NotFoundError: If no file exists for the id
        """
        file_path, meta_path = self._paths(storage_id)
        if not file_path.exists() or not meta_path.exists():
            raise NotFoundError("File not found")

        meta = json.loads(meta_path.read_text())
        return StoredAsset(
            id=storage_id,
            file_path=file_path,
            file_size_bytes=meta["file_size_bytes"],
            mime_type=meta["mime_type"],
            checksum=meta["checksum"],
            kind=meta.get("kind", "video"),
            file_name=meta.get("file_name"),
            metadata=meta.get("metadata") or {},
            created_at=datetime.fromisoformat(meta["created_at"]),
        )

    def read_bytes(self, storage_id: str) -> bytes:
        return self.get_asset(storage_id).file_path.read_bytes()

    def get_url(self, storage_id: str) -> str:
        """Public URL serving the file through the files endpoint."""
        return f"{self.public_base_url}/api/v1/files/{storage_id}"

    def verify_asset(self, asset: StoredAsset) -> bool:
        """Verify an asset exists and matches its checksum."""
        if not asset.file_path.exists():
            return False
        return self._compute_checksum(asset.file_path.read_bytes()) == asset.checksum

    def delete(self, storage_id: str) -> bool:
        """Delete a stored file. Returns False when it did not exist."""
        file_path, meta_path = self._paths(storage_id)
        existed = file_path.exists()
        file_path.unlink(missing_ok=True)
        meta_path.unlink(missing_ok=True)
        if existed:
            logger.info("storage_file_deleted", storage_id=storage_id)
        return existed
