"""Thumbnail image generation interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

# YouTube thumbnails are landscape; 1792x1024 is the closest 16:9 size DALL-E 3 renders
THUMBNAIL_SIZE = "1792x1024"


@dataclass
class ImageGenRequest:
    prompt: str
    size: str = THUMBNAIL_SIZE
    quality: str = "hd"  # hd or standard
    style: str = "vivid"  # vivid or natural


@dataclass
class ImageGenResult:
    """A rendered image, as raw bytes or a hosted URL."""

    success: bool
    image_url: str | None = None
    image_data: bytes | None = None
    content_type: str = "image/png"
    error_message: str | None = None
    revised_prompt: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def has_image(self) -> bool:
        return bool(self.image_data or self.image_url)


class ImageGenProvider(ABC):
    """Renders a thumbnail concept into an image."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def generate(self, request: ImageGenRequest) -> ImageGenResult:
        """Render one image.

        Expected failures (bad prompt, provider refusal) come back as an
        unsuccessful result; missing credentials raise ConfigurationError.
        """
        ...

    async def health_check(self) -> bool:
        return True
