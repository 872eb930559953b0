"""OpenAI chat completions (text and vision)."""

from typing import Any

import httpx

from vidcraft.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse, VisionMessage
from vidcraft.config import settings
from vidcraft.errors import ConfigurationError
from vidcraft.logging import get_logger

logger = get_logger(__name__)


def _vision_content(message: VisionMessage) -> str | list[dict[str, Any]]:
    if not message.image_urls:
        return message.text
    parts: list[dict[str, Any]] = [{"type": "text", "text": message.text}]
    parts.extend(
        {"type": "image_url", "image_url": {"url": url, "detail": message.image_detail}}
        for url in message.image_urls
    )
    return parts


class OpenAIProvider(LLMProvider):
    """GPT models for drafts and chat; the vision model reads thumbnail frames."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        vision_model: str | None = None,
        base_url: str = "https://api.openai.com/v1",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model
        self.vision_model = vision_model or settings.openai_vision_model
        self.base_url = base_url
        self._transport = transport

        if not self.api_key:
            logger.warning("openai_key_missing")

    @property
    def name(self) -> str:
        return f"openai:{self.model}"

    @property
    def supports_vision(self) -> bool:
        return True

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise ConfigurationError(
                "OpenAI API key not configured. Set OPENAI_API_KEY to enable AI generation."
            )
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    @staticmethod
    def _payload(
        model: str,
        messages: list[dict[str, Any]],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def _chat(self, payload: dict[str, Any]) -> LLMResponse:
        headers = self._headers()
        async with httpx.AsyncClient(timeout=120.0, transport=self._transport) as client:
            response = await client.post(
                f"{self.base_url}/chat/completions", headers=headers, json=payload
            )
            # Status errors are categorized by the caller
            response.raise_for_status()
            data = response.json()

        choice = data["choices"][0]
        usage = data.get("usage") or {}
        result = LLMResponse(
            content=choice["message"].get("content") or "",
            model=data.get("model", payload["model"]),
            usage={
                key: usage.get(key, 0)
                for key in ("prompt_tokens", "completion_tokens", "total_tokens")
            },
            raw_response=data,
            finish_reason=choice.get("finish_reason"),
        )
        logger.info(
            "openai_completion",
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
        formatted = [{"role": m.role, "content": m.content} for m in messages]
        return await self._chat(
            self._payload(self.model, formatted, temperature, max_tokens, json_mode)
        )

    async def complete_with_vision(
        self,
        messages: list[VisionMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        formatted = [{"role": m.role, "content": _vision_content(m)} for m in messages]
        logger.debug(
            "openai_vision_request",
            model=self.vision_model,
            image_count=sum(len(m.image_urls) for m in messages),
        )
        return await self._chat(
            self._payload(self.vision_model, formatted, temperature, max_tokens, json_mode)
        )

    async def health_check(self) -> bool:
        if not self.api_key:
            return False
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.get(
                    f"{self.base_url}/models",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            logger.error("openai_health_check_failed", error=str(e))
            return False
        return response.status_code == 200
