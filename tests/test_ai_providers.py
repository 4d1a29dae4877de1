"""
Tests for AI Providers - Base classes and mocked LLM calls.

This module tests:
- TokenUsage dataclass
- AIResponse dataclass
- Provider type enum and provider selection
- Each provider against a mocked SDK client

We mock LLM calls to ensure tests are:
- Fast (no network calls)
- Reliable (no API flakiness)
- Free (no token costs)
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from sirius.ai.providers import (
    AnthropicProvider,
    GeminiProvider,
    OpenAIProvider,
    get_provider,
    gemini_provider,
    openai_provider,
)
from sirius.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from sirius.core.errors import ConfigurationError


REPLY = '{"type": "action", "command": {"action": "open", "target": "garage"}}'


class TestTokenUsage:
    """Tests for TokenUsage dataclass."""

    def test_create_basic_usage(self):
        """Test creating token usage with all fields."""
        usage = TokenUsage(prompt_tokens=100, completion_tokens=50, total_tokens=150)

        assert usage.prompt_tokens == 100
        assert usage.completion_tokens == 50
        assert usage.total_tokens == 150

    def test_auto_calculate_total(self):
        """Test that total is auto-calculated if not provided."""
        usage = TokenUsage(prompt_tokens=100, completion_tokens=50)

        assert usage.total_tokens == 150

    def test_default_values(self):
        """Test default values are zeros."""
        usage = TokenUsage()

        assert usage.prompt_tokens == 0
        assert usage.completion_tokens == 0
        assert usage.total_tokens == 0

    def test_total_overrides_calculation(self):
        """Test that explicit total is not recalculated when it's non-zero."""
        usage = TokenUsage(prompt_tokens=100, completion_tokens=50, total_tokens=200)

        assert usage.total_tokens == 200


class TestAIResponse:
    """Tests for AIResponse dataclass."""

    def test_create_success_response(self):
        response = AIResponse(content=REPLY, provider=ProviderType.GEMINI, model="gemini-2.5-flash")

        assert response.content == REPLY
        assert response.success is True
        assert response.error is None

    def test_create_error_response(self):
        response = AIResponse(
            content="",
            provider=ProviderType.OPENAI,
            model="gpt-4o-mini",
            success=False,
            error="Rate limit exceeded",
        )

        assert response.success is False
        assert response.error == "Rate limit exceeded"

    def test_to_dict(self):
        """Test conversion to dictionary."""
        response = AIResponse(
            content="Test content",
            provider=ProviderType.GEMINI,
            model="gemini-2.5-flash",
            usage=TokenUsage(prompt_tokens=100, completion_tokens=50),
            latency_ms=200.0,
        )

        result = response.to_dict()

        assert result["provider"] == "gemini"
        assert result["tokens"] == {"prompt": 100, "completion": 50, "total": 150}
        assert result["latency_ms"] == 200.0
        assert result["success"] is True

    def test_to_dict_truncates_long_content(self):
        """Test that long content is truncated in to_dict."""
        response = AIResponse(content="x" * 200, provider=ProviderType.GEMINI, model="test")

        result = response.to_dict()

        assert len(result["content"]) == 103
        assert result["content"].endswith("...")

    def test_created_at_timestamp(self):
        before = datetime.now(timezone.utc)
        response = AIResponse(content="Test", provider=ProviderType.GEMINI, model="test")
        after = datetime.now(timezone.utc)

        assert before <= response.created_at <= after


class TestProviderSelection:
    """Tests for ProviderType and get_provider()."""

    def test_all_providers_exist(self):
        assert ProviderType.GEMINI.value == "gemini"
        assert ProviderType.OPENAI.value == "openai"
        assert ProviderType.ANTHROPIC.value == "anthropic"
        assert len(ProviderType) == 3

    def test_get_provider_by_name(self):
        assert get_provider("gemini") is gemini_provider
        assert get_provider(" OpenAI ") is openai_provider
        assert isinstance(get_provider("anthropic"), AnthropicProvider)

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError):
            get_provider("llama")


class TestProviderContract:
    """Tests for what AIProvider asks of subclasses."""

    @pytest.mark.asyncio
    async def test_generate_json_is_the_only_required_call(self, ai_response):
        """A provider implementing just generate_json is complete."""
        class CannedProvider(AIProvider):
            provider_type = ProviderType.GEMINI
            model = "canned"
            timeout = 1.0

            async def generate_json(self, prompt, system_prompt=None, **kwargs):
                return ai_response(REPLY)

        provider = CannedProvider()

        assert (await provider.generate_json("open the garage")).content == REPLY
        assert AIProvider.__abstractmethods__ == frozenset({"generate_json"})
        for provider_cls in [GeminiProvider, OpenAIProvider, AnthropicProvider]:
            assert not hasattr(provider_cls, "generate")


class TestUnconfiguredProviders:
    """Providers without an API key fail softly."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("provider_cls", [GeminiProvider, OpenAIProvider, AnthropicProvider])
    async def test_missing_key_returns_error_response(self, provider_cls):
        provider = provider_cls(model="test-model")
        provider._client = None

        response = await provider.generate_json("open the garage")

        assert provider.is_configured is False
        assert response.success is False
        assert "not configured" in response.error
        assert response.provider == provider.provider_type


class TestGeminiProvider:
    """Tests for GeminiProvider with a mocked SDK client."""

    @pytest.fixture
    def provider(self):
        provider = GeminiProvider(model="gemini-test")
        provider._client = MagicMock()
        return provider

    @pytest.mark.asyncio
    async def test_generate_json(self, provider):
        usage = SimpleNamespace(prompt_token_count=30, candidates_token_count=12)
        provider._client.aio.models.generate_content = AsyncMock(
            return_value=SimpleNamespace(text=f"  {REPLY}\n", usage_metadata=usage)
        )

        response = await provider.generate_json('User query: "open the garage"', system_prompt="rules")

        assert response.success is True
        assert response.content == REPLY
        assert response.usage.total_tokens == 42
        config = provider._client.aio.models.generate_content.call_args.kwargs["config"]
        assert config.response_mime_type == "application/json"
        assert config.system_instruction == "rules"

    @pytest.mark.asyncio
    async def test_empty_text(self, provider):
        """A blocked or empty candidate comes back as empty content."""
        provider._client.aio.models.generate_content = AsyncMock(
            return_value=SimpleNamespace(text=None, usage_metadata=None)
        )

        response = await provider.generate_json("hello")

        assert response.success is True
        assert response.content == ""

    @pytest.mark.asyncio
    async def test_sdk_error(self, provider):
        provider._client.aio.models.generate_content = AsyncMock(side_effect=RuntimeError("503 UNAVAILABLE"))

        response = await provider.generate_json("hello")

        assert response.success is False
        assert "503" in response.error


class TestOpenAIProvider:
    """Tests for OpenAIProvider with a mocked SDK client."""

    @pytest.mark.asyncio
    async def test_generate_json_uses_json_mode(self):
        provider = OpenAIProvider(model="gpt-test")
        provider._client = MagicMock()
        provider._client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=REPLY))],
            usage=SimpleNamespace(prompt_tokens=20, completion_tokens=10),
        ))

        response = await provider.generate_json("open the garage", system_prompt="rules")

        assert response.success is True
        assert response.content == REPLY
        assert response.usage.total_tokens == 30
        kwargs = provider._client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["role"] == "system"

    @pytest.mark.asyncio
    async def test_sdk_error(self):
        provider = OpenAIProvider(model="gpt-test")
        provider._client = MagicMock()
        provider._client.chat.completions.create = AsyncMock(side_effect=RuntimeError("Connection error"))

        response = await provider.generate_json("hello")

        assert response.success is False
        assert response.error == "Connection error"


class TestAnthropicProvider:
    """Tests for AnthropicProvider with a mocked SDK client."""

    @pytest.mark.asyncio
    async def test_generate_json_joins_text_blocks(self):
        provider = AnthropicProvider(model="claude-test")
        provider._client = MagicMock()
        provider._client.messages.create = AsyncMock(return_value=SimpleNamespace(
            content=[SimpleNamespace(text='{"type": "conversation", '), SimpleNamespace(text='"message": "Hi"}')],
            usage=SimpleNamespace(input_tokens=15, output_tokens=5),
        ))

        response = await provider.generate_json("hello", system_prompt="rules")

        assert response.success is True
        assert response.content == '{"type": "conversation", "message": "Hi"}'
        assert response.usage.total_tokens == 20
        assert "rules" in provider._client.messages.create.call_args.kwargs["system"]
