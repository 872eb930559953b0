"""Offline LLM provider for tests and local development."""

import json
import re

from vidcraft.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse, VisionMessage
from vidcraft.logging import get_logger

logger = get_logger(__name__)

_SENTINEL_RE = re.compile(r"UPDATED ([A-Z]+):")

STUB_BLOG_POST = {
    "title": "A Stub Blog Post About Your Video",
    "content": "<h2>Introduction</h2><p>This is stub blog content.</p>",
    "metaDescription": "A short stub meta description for testing blog generation.",
    "keywords": ["stub", "video", "testing"],
    "links": [{"url": "https://example.com", "title": "Example"}],
}


def _usage(prompt_tokens: int, content: str) -> dict[str, int]:
    completion_tokens = len(content.split())
    return {
        "prompt_tokens": prompt_tokens,
        "completion_tokens": completion_tokens,
        "total_tokens": prompt_tokens + completion_tokens,
    }


class StubLLMProvider(LLMProvider):
    """Deterministic replies that follow the real prompts' output contracts.

    Blog requests (json_mode) get a JSON post; a system prompt asking for an
    ``UPDATED <TYPE>:`` section gets one, echoing the latest chat request.
    """

    @property
    def name(self) -> str:
        return "stub"

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,  # noqa: ARG002
        max_tokens: int = 4096,  # noqa: ARG002
        json_mode: bool = False,
    ) -> LLMResponse:
        prompt = next((m.content for m in reversed(messages) if m.role == "user"), "")
        system = next((m.content for m in messages if m.role == "system"), "")
        logger.debug("stub_llm_complete", message_count=len(messages), json_mode=json_mode)

        sentinel = _SENTINEL_RE.search(system)
        if json_mode:
            content = json.dumps(STUB_BLOG_POST, indent=2)
        elif sentinel:
            # Last "User:" line of a refinement prompt is the new request
            request = prompt.rsplit("User:", 1)[-1].split("\n")[0].strip()
            content = (
                f"Sure! I've updated it based on your request: {request}\n\n"
                f"UPDATED {sentinel.group(1)}:\nRefined stub content ({request[:60]})"
            )
        else:
            content = f"This is a stub response for: {prompt[:100]}"

        return LLMResponse(
            content=content,
            model="stub-model",
            usage=_usage(len(prompt.split()), content),
            finish_reason="stop",
        )

    @property
    def supports_vision(self) -> bool:
        return True

    async def complete_with_vision(
        self,
        messages: list[VisionMessage],
        temperature: float = 0.7,  # noqa: ARG002
        max_tokens: int = 4096,  # noqa: ARG002
        json_mode: bool = False,  # noqa: ARG002
    ) -> LLMResponse:
        frame_count = sum(len(m.image_urls) for m in messages)
        logger.debug("stub_llm_vision_complete", frame_count=frame_count)

        content = (
            f"Thumbnail concept based on {frame_count} frames: a close-up of the creator "
            "with a surprised expression on the left third, bold yellow text 'IT WORKS?!' "
            "on the right, high-contrast blue background."
        )
        # Vision models bill roughly 85 tokens per low-detail image
        return LLMResponse(
            content=content,
            model="stub-vision-model",
            usage=_usage(frame_count * 85, content),
            finish_reason="stop",
        )
