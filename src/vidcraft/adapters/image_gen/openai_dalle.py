"""DALL-E 3 thumbnail renderer."""

import base64
from typing import Any

import httpx

from vidcraft.adapters.image_gen.base import ImageGenProvider, ImageGenRequest, ImageGenResult
from vidcraft.config import settings
from vidcraft.errors import ConfigurationError, categorize_error
from vidcraft.logging import get_logger

logger = get_logger(__name__)

DALLE_SIZES = frozenset({"1792x1024", "1024x1792", "1024x1024"})


class OpenAIDalleProvider(ImageGenProvider):
    """Renders thumbnails with DALL-E 3.

    Images are requested as base64 and stored by the caller, because hosted
    DALL-E URLs expire after about an hour.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "dall-e-3",
        base_url: str = "https://api.openai.com/v1",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key
        self.model = model
        self.base_url = base_url
        self._transport = transport

    @property
    def name(self) -> str:
        return "dalle3"

    def _payload(self, request: ImageGenRequest) -> dict[str, Any]:
        size = request.size
        if size not in DALLE_SIZES:
            logger.warning("dalle_size_unsupported", size=size)
            size = "1792x1024"
        return {
            "model": self.model,
            "prompt": request.prompt,
            "n": 1,
            "size": size,
            "quality": request.quality,
            "style": request.style,
            "response_format": "b64_json",
        }

    async def generate(self, request: ImageGenRequest) -> ImageGenResult:
        """Render one image.

        Raises:
            ConfigurationError: If no OpenAI API key is configured
            ServiceError: On network failures or rate limiting, categorized
        """
        if not self.api_key:
            raise ConfigurationError(
                "OpenAI API key not configured. Set OPENAI_API_KEY to enable thumbnail images."
            )

        payload = self._payload(request)
        log = logger.bind(size=payload["size"], quality=payload["quality"])
        log.info("dalle_generation_started", prompt_chars=len(request.prompt))

        try:
            async with httpx.AsyncClient(timeout=120.0, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/images/generations",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise categorize_error(e, context="dalle_generate") from e

        if response.status_code == 429 or response.status_code >= 500:
            raise categorize_error(
                httpx.HTTPStatusError(
                    f"DALL-E API error ({response.status_code})",
                    request=response.request,
                    response=response,
                ),
                context="dalle_generate",
            )
        if response.status_code != 200:
            try:
                message = response.json().get("error", {}).get("message", response.text)
            except ValueError:
                message = response.text
            log.error("dalle_generation_failed", status_code=response.status_code, error=message)
            return ImageGenResult(success=False, error_message=f"DALL-E API error: {message}")

        image = (response.json().get("data") or [{}])[0]
        b64_data = image.get("b64_json")
        result = ImageGenResult(
            success=True,
            image_url=image.get("url"),
            image_data=base64.b64decode(b64_data) if b64_data else None,
            revised_prompt=image.get("revised_prompt"),
            metadata={"model": self.model, "size": payload["size"]},
        )
        if not result.has_image:
            return ImageGenResult(success=False, error_message="No image in response")

        log.info("dalle_generation_completed", has_bytes=result.image_data is not None)
        return result

    async def health_check(self) -> bool:
        if not self.api_key:
            return False
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.get(
                    f"{self.base_url}/models",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError:
            return False
        return response.status_code == 200
