"""Offline thumbnail renderer for tests and local development."""

import base64

from vidcraft.adapters.image_gen.base import ImageGenProvider, ImageGenRequest, ImageGenResult
from vidcraft.logging import get_logger

logger = get_logger(__name__)

# 1x1 transparent PNG
PLACEHOLDER_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class StubImageGenProvider(ImageGenProvider):
    """Returns a placeholder PNG, or a placeholder URL with ``return_bytes=False``."""

    def __init__(self, return_bytes: bool = True) -> None:
        self.return_bytes = return_bytes
        self.requests: list[ImageGenRequest] = []

    @property
    def name(self) -> str:
        return "stub"

    async def generate(self, request: ImageGenRequest) -> ImageGenResult:
        self.requests.append(request)
        logger.debug("stub_image_generated", prompt_chars=len(request.prompt), size=request.size)

        if self.return_bytes:
            return ImageGenResult(success=True, image_data=PLACEHOLDER_PNG, revised_prompt=request.prompt)
        return ImageGenResult(
            success=True,
            image_url=f"https://placehold.co/{request.size}/1a1a1a/ffffff?text=Thumbnail",
        )
