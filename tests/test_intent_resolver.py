"""
Tests for the intent resolver.

We mock the provider to ensure tests are:
- Fast (no network calls)
- Reliable (no API flakiness)
- Free (no token costs)

Key properties:
- Empty input never reaches the model
- "Model unreachable" and "model replied with garbage" stay distinguishable
- Slow models are cut off by the resolver timeout
"""

import asyncio

import pytest

from sirius.ai.intent.parser import IntentResolver, UPSTREAM_TIMEOUT_MESSAGE
from sirius.ai.monitoring import ai_monitor
from sirius.ai.prompts.intent_prompts import INTENT_SYSTEM_PROMPT
from sirius.ai.schemas.resolver_outcome import (
    FALLBACK_MESSAGE,
    ActionOutcome,
    ConversationOutcome,
    ErrorOutcome,
)
from sirius.core.errors import ErrorKind, InputError


class TestInputValidation:
    """Tests for empty input."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
    async def test_empty_input_rejected_without_model_call(self, text, provider_factory):
        """Empty or whitespace-only text raises before any network call."""
        provider = provider_factory('{"type": "conversation", "message": "Hi"}')
        resolver = IntentResolver(provider=provider, timeout=1.0)

        with pytest.raises(InputError):
            await resolver.classify(text)

        provider.generate_json.assert_not_called()


class TestClassify:
    """Tests for successful model calls."""

    @pytest.mark.asyncio
    async def test_action_outcome(self, provider_factory, action_reply):
        """A valid action reply becomes an ActionOutcome."""
        resolver = IntentResolver(provider=provider_factory(action_reply), timeout=1.0)

        outcome = await resolver.classify("turn on the garage light")

        assert isinstance(outcome, ActionOutcome)
        assert outcome.command.action == "on"
        assert outcome.command.target == "garage_led"

    @pytest.mark.asyncio
    async def test_prompt_contains_request_and_instructions(self, provider_factory, action_reply):
        """The user text and the instruction template are both sent."""
        provider = provider_factory(action_reply)
        resolver = IntentResolver(provider=provider, timeout=1.0)

        await resolver.classify("  turn on the garage light  ")

        kwargs = provider.generate_json.call_args.kwargs
        assert "turn on the garage light" in kwargs["prompt"]
        assert kwargs["system_prompt"] == INTENT_SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_braces_in_user_text(self, provider_factory, action_reply):
        """User text is inserted verbatim, braces included."""
        provider = provider_factory(action_reply)
        resolver = IntentResolver(provider=provider, timeout=1.0)

        await resolver.classify("say {hello}")

        assert "say {hello}" in provider.generate_json.call_args.kwargs["prompt"]

    @pytest.mark.asyncio
    async def test_fenced_reply(self, provider_factory):
        """Markdown fences from the model are tolerated."""
        resolver = IntentResolver(
            provider=provider_factory('```json\n{"type": "conversation", "message": "Hello!"}\n```'),
            timeout=1.0,
        )

        outcome = await resolver.classify("hello")

        assert isinstance(outcome, ConversationOutcome)
        assert outcome.message == "Hello!"

    @pytest.mark.asyncio
    async def test_garbage_reply_falls_back(self, provider_factory):
        """Prose from the model becomes the fallback conversation outcome."""
        resolver = IntentResolver(provider=provider_factory("Sure, turning it on!"), timeout=1.0)

        outcome = await resolver.classify("turn on the light")

        assert isinstance(outcome, ConversationOutcome)
        assert outcome.message == FALLBACK_MESSAGE
        assert ai_monitor.get_stats().fallback_replies == 1


class TestUpstreamFailures:
    """Tests for model failures."""

    @pytest.mark.asyncio
    async def test_provider_failure_is_upstream_error(self, provider_factory, ai_response):
        """A failed provider call is an error outcome, not the fallback."""
        provider = provider_factory(ai_response(success=False, error="503 Service Unavailable"))
        resolver = IntentResolver(provider=provider, timeout=1.0)

        outcome = await resolver.classify("open the garage")

        assert isinstance(outcome, ErrorOutcome)
        assert outcome.code == ErrorKind.UPSTREAM_MODEL_ERROR
        assert outcome.message != FALLBACK_MESSAGE

    @pytest.mark.asyncio
    async def test_timeout_is_upstream_error(self, provider_factory, action_reply, ai_response):
        """A model slower than the timeout is cut off."""
        async def slow_reply(*args, **kwargs):
            await asyncio.sleep(5)
            return ai_response(action_reply)

        resolver = IntentResolver(provider=provider_factory(slow_reply), timeout=0.05)

        outcome = await resolver.classify("open the garage")

        assert isinstance(outcome, ErrorOutcome)
        assert outcome.code == ErrorKind.UPSTREAM_MODEL_ERROR
        assert outcome.message == UPSTREAM_TIMEOUT_MESSAGE

    @pytest.mark.asyncio
    async def test_raising_provider_is_upstream_error(self, provider_factory):
        """An exception from the provider never escapes."""
        async def broken(*args, **kwargs):
            raise RuntimeError("connection reset")

        resolver = IntentResolver(provider=provider_factory(broken), timeout=1.0)

        outcome = await resolver.classify("open the garage")

        assert isinstance(outcome, ErrorOutcome)
        assert outcome.code == ErrorKind.UPSTREAM_MODEL_ERROR

    @pytest.mark.asyncio
    async def test_failures_are_counted(self, provider_factory, ai_response):
        """Failed calls show up in the monitor."""
        provider = provider_factory(ai_response(success=False, error="boom"))
        resolver = IntentResolver(provider=provider, timeout=1.0)

        await resolver.classify("open the garage")

        stats = ai_monitor.get_stats()
        assert stats.total_requests == 1
        assert stats.failed_requests == 1
        assert stats.outcomes_by_type == {"error": 1}

    @pytest.mark.asyncio
    async def test_timeout_is_counted_as_failed_request(self, provider_factory, action_reply, ai_response):
        """A call cut off by the timeout still shows up as a failed request."""
        async def slow_reply(*args, **kwargs):
            await asyncio.sleep(5)
            return ai_response(action_reply)

        resolver = IntentResolver(provider=provider_factory(slow_reply), timeout=0.05)

        await resolver.classify("open the garage")

        stats = ai_monitor.get_stats()
        assert stats.total_requests == 1
        assert stats.failed_requests == 1
        assert stats.requests_by_provider == {"gemini": 1}

    @pytest.mark.asyncio
    async def test_exception_is_counted_as_failed_request(self, provider_factory):
        """A provider that raises is counted like one that reported failure."""
        async def broken(*args, **kwargs):
            raise RuntimeError("connection reset")

        resolver = IntentResolver(provider=provider_factory(broken), timeout=1.0)

        await resolver.classify("open the garage")

        stats = ai_monitor.get_stats()
        assert stats.total_requests == 1
        assert stats.failed_requests == 1
        assert stats.success_rate == 0.0


class TestInstructionTemplate:
    """Tests for the rendered instruction template."""

    def test_every_target_listed(self):
        """The prompt names every target exactly as the device API does."""
        from sirius.services.commands import DeviceTarget

        for target in DeviceTarget:
            assert f'(target: "{target.value}")' in INTENT_SYSTEM_PROMPT

    def test_all_four_shapes_described(self):
        for shape in ["action", "conversation", "clarification", "error"]:
            assert f'"type": "{shape}"' in INTENT_SYSTEM_PROMPT
