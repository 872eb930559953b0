"""LLM provider adapters."""

from vidcraft.adapters.llm.anthropic import AnthropicProvider
from vidcraft.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse, VisionMessage
from vidcraft.adapters.llm.openai import OpenAIProvider
from vidcraft.adapters.llm.stub import StubLLMProvider
from vidcraft.config import settings
from vidcraft.logging import get_logger

logger = get_logger(__name__)


def get_llm_provider() -> LLMProvider:
    """Get the configured LLM provider, falling back on available API keys."""
    provider_name = settings.llm_provider.lower()

    if provider_name == "stub":
        return StubLLMProvider()
    if provider_name == "anthropic" and settings.anthropic_api_key:
        return AnthropicProvider()
    if provider_name == "openai" and settings.openai_api_key:
        return OpenAIProvider()

    if settings.openai_api_key:
        return OpenAIProvider()
    if settings.anthropic_api_key:
        return AnthropicProvider()

    # Real provider requested without a key: it raises a ConfigurationError on first use
    logger.warning("llm_api_key_missing", provider=provider_name)
    return AnthropicProvider() if provider_name == "anthropic" else OpenAIProvider()


__all__ = [
    "AnthropicProvider",
    "LLMMessage",
    "LLMProvider",
    "LLMResponse",
    "OpenAIProvider",
    "StubLLMProvider",
    "VisionMessage",
    "get_llm_provider",
]
