"""
AI Providers Module - Unified clients for hosted LLMs.

Every provider has the same interface, so the resolver does not care
which one classifies an utterance:

    response = await provider.generate_json(prompt, system_prompt=...)

LLM_PROVIDER selects the active one (gemini by default).
"""

from sirius.core.config import settings
from sirius.core.errors import ConfigurationError
from sirius.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from sirius.ai.providers.gemini import GeminiProvider, gemini_provider
from sirius.ai.providers.openai_provider import OpenAIProvider, openai_provider
from sirius.ai.providers.anthropic_provider import AnthropicProvider, anthropic_provider

_PROVIDERS = {
    ProviderType.GEMINI.value: gemini_provider,
    ProviderType.OPENAI.value: openai_provider,
    ProviderType.ANTHROPIC.value: anthropic_provider,
}


def get_provider(name: str = None) -> AIProvider:
    """
    Return the provider singleton registered under `name`.

    Raises:
        ConfigurationError: If the name is not a supported provider
    """
    key = (name or settings.LLM_PROVIDER).strip().lower()
    try:
        return _PROVIDERS[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown LLM provider '{key}'. Expected one of: {', '.join(sorted(_PROVIDERS))}"
        )


__all__ = [
    "AIProvider",
    "AIResponse",
    "ProviderType",
    "TokenUsage",
    "GeminiProvider",
    "gemini_provider",
    "OpenAIProvider",
    "openai_provider",
    "AnthropicProvider",
    "anthropic_provider",
    "get_provider",
]
