"""File upload and download endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse
from pydantic import BaseModel

from vidcraft.api.deps import StorageServiceDep, UserIdDep
from vidcraft.config import settings
from vidcraft.db.session import get_session_context
from vidcraft.services.uploads import UploadSlotService

router = APIRouter(prefix="/files", tags=["Files"])


class UploadUrlRequest(BaseModel):
    content_type: str | None = None


class UploadUrlResponse(BaseModel):
    upload_url: str
    storage_id: str | None = None


class UploadResponse(BaseModel):
    storage_id: str
    file_size: int
    mime_type: str


@router.post(
    "/upload-url",
    response_model=UploadUrlResponse,
    summary="Request upload URL",
    description="Issue a single-use URL that accepts one raw file upload.",
)
async def create_upload_url(
    user_id: UserIdDep, request: UploadUrlRequest | None = None
) -> UploadUrlResponse:
    content_type = request.content_type if request else None
    with get_session_context() as session:
        slot = UploadSlotService(session).create_slot(user_id, content_type)
        token = slot.token
    return UploadUrlResponse(
        upload_url=f"{settings.public_base_url.rstrip('/')}/api/v1/files/upload/{token}"
    )


@router.post(
    "/upload/{token}",
    response_model=UploadResponse,
    summary="Upload file",
    description="Send the raw file bytes with a matching Content-Type header. "
    "The URL cannot be reused.",
)
async def upload_file(
    token: str, request: Request, storage: StorageServiceDep
) -> UploadResponse:
    data = await request.body()
    with get_session_context() as session:
        asset = UploadSlotService(session, storage).consume(
            token, data, request.headers.get("content-type")
        )
    return UploadResponse(
        storage_id=asset.id,
        file_size=asset.file_size_bytes,
        mime_type=asset.mime_type,
    )


@router.get(
    "/{storage_id}",
    summary="Download file",
    description="Serve a stored file by its storage id.",
    response_class=FileResponse,
)
async def get_file(storage_id: str, storage: StorageServiceDep) -> FileResponse:
    asset = storage.get_asset(storage_id)
    return FileResponse(asset.file_path, media_type=asset.mime_type, filename=asset.file_name)
