"""Language model interface used by content generation and chat refinement."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

# Finish reasons meaning the reply hit the token limit
TRUNCATED_FINISH_REASONS = frozenset({"length", "max_tokens"})


@dataclass
class LLMResponse:
    """One model reply."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    raw_response: dict[str, Any] | None = None
    finish_reason: str | None = None

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)

    @property
    def truncated(self) -> bool:
        return self.finish_reason in TRUNCATED_FINISH_REASONS


@dataclass
class LLMMessage:
    role: str  # system, user or assistant
    content: str

    @classmethod
    def system(cls, content: str) -> "LLMMessage":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "LLMMessage":
        return cls(role="user", content=content)


@dataclass
class VisionMessage:
    """A message carrying video frames as data URLs next to its text."""

    role: str
    text: str
    image_urls: list[str] = field(default_factory=list)
    image_detail: str = "auto"  # low, high or auto


class LLMProvider(ABC):
    """A chat completion backend (OpenAI, Anthropic or the test stub)."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Complete a conversation.

        Args:
            messages: System and user turns, in order
            temperature: Sampling temperature
            max_tokens: Reply token limit
            json_mode: Ask the model for a single JSON object

        Raises:
            ServiceError: On provider failures, already categorized
        """
        ...

    async def ask(
        self,
        system_prompt: str,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Single-turn completion: one system prompt and one user prompt."""
        return await self.complete(
            [LLMMessage.system(system_prompt), LLMMessage.user(prompt)],
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=json_mode,
        )

    async def complete_with_vision(
        self,
        messages: list[VisionMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        raise NotImplementedError(f"{self.name} does not accept images")

    @property
    def supports_vision(self) -> bool:
        return False

    async def health_check(self) -> bool:
        return True
