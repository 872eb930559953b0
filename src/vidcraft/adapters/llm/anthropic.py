"""Anthropic Messages API (Claude) for drafts, chat and frame analysis."""

from typing import Any

import httpx

from vidcraft.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse, VisionMessage
from vidcraft.config import settings
from vidcraft.errors import ConfigurationError
from vidcraft.logging import get_logger

logger = get_logger(__name__)

ANTHROPIC_VERSION = "2023-06-01"
JSON_ONLY_INSTRUCTION = "IMPORTANT: You must respond with valid JSON only. No other text."


def _image_block(url: str) -> dict[str, Any]:
    # Frames arrive as data URIs; anything else is passed by URL
    if url.startswith("data:") and ";base64," in url:
        header, data = url.split(";base64,", 1)
        return {
            "type": "image",
            "source": {"type": "base64", "media_type": header[len("data:") :], "data": data},
        }
    return {"type": "image", "source": {"type": "url", "url": url}}


def _system_text(parts: list[str], json_mode: bool) -> str:
    # No JSON response format on this API, so the system prompt carries it
    if json_mode:
        parts = [*parts, JSON_ONLY_INSTRUCTION]
    return "\n\n".join(p for p in parts if p)


class AnthropicProvider(LLMProvider):
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = "https://api.anthropic.com/v1",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.anthropic_api_key
        self.model = model or settings.anthropic_model
        self.base_url = base_url
        self._transport = transport

        if not self.api_key:
            logger.warning("anthropic_key_missing")

    @property
    def name(self) -> str:
        return f"anthropic:{self.model}"

    @property
    def supports_vision(self) -> bool:
        return True

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise ConfigurationError(
                "Anthropic API key not configured. Set ANTHROPIC_API_KEY to enable AI generation."
            )
        return {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }

    async def _post_messages(self, payload: dict[str, Any], timeout: float = 120.0) -> httpx.Response:
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            return await client.post(
                f"{self.base_url}/messages", headers=self._headers(), json=payload
            )

    async def _send(
        self,
        system: str,
        conversation: list[dict[str, Any]],
        temperature: float,
        max_tokens: int,
    ) -> LLMResponse:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": conversation,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if system:
            payload["system"] = system

        response = await self._post_messages(payload)
        response.raise_for_status()
        data = response.json()

        text = "".join(
            block.get("text", "")
            for block in data.get("content") or []
            if block.get("type") == "text"
        )
        usage = data.get("usage") or {}
        prompt_tokens = usage.get("input_tokens", 0)
        completion_tokens = usage.get("output_tokens", 0)
        result = LLMResponse(
            content=text,
            model=data.get("model", self.model),
            usage={
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            },
            raw_response=data,
            finish_reason=data.get("stop_reason"),
        )
        logger.info(
            "anthropic_completion",
            model=result.model,
            tokens=result.total_tokens,
            finish_reason=result.finish_reason,
        )
        return result

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        system = _system_text([m.content for m in messages if m.role == "system"], json_mode)
        conversation = [
            {"role": m.role, "content": m.content} for m in messages if m.role != "system"
        ]
        return await self._send(system, conversation, temperature, max_tokens)

    async def complete_with_vision(
        self,
        messages: list[VisionMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        system = _system_text([m.text for m in messages if m.role == "system"], json_mode)
        conversation = [
            {
                "role": m.role,
                "content": [
                    *(_image_block(url) for url in m.image_urls),
                    {"type": "text", "text": m.text},
                ],
            }
            for m in messages
            if m.role != "system"
        ]
        return await self._send(system, conversation, temperature, max_tokens)

    async def health_check(self) -> bool:
        if not self.api_key:
            return False
        # A one-token request is the cheapest call that proves the key works
        try:
            response = await self._post_messages(
                {
                    "model": self.model,
                    "messages": [{"role": "user", "content": "hi"}],
                    "max_tokens": 1,
                },
                timeout=10.0,
            )
        except httpx.HTTPError as e:
            logger.error("anthropic_health_check_failed", error=str(e))
            return False
        return response.status_code == 200
