"""
Intent Resolver - turns a spoken/typed command into a ResolverOutcome.

This is the core NLU step. The resolver:
1. Rejects empty input before any network call
2. Sends the instruction template + user text to the configured LLM
   (one attempt, bounded by AI_REQUEST_TIMEOUT)
3. Normalizes whatever text comes back into exactly one outcome

It never raises for model-facing problems. The two failure modes stay
distinguishable:
- Model unreachable / timed out  -> ErrorOutcome(code=UPSTREAM_MODEL_ERROR)
- Model replied with garbage     -> fallback ConversationOutcome
"""

import asyncio
import logging
import time
import uuid
from typing import Optional

from sirius.core.config import settings
from sirius.core.errors import ErrorKind, InputError, MalformedModelReply
from sirius.ai.monitoring import ai_monitor
from sirius.ai.providers import AIProvider, get_provider
from sirius.ai.providers.base import AIResponse
from sirius.ai.prompts.intent_prompts import (
    INTENT_SYSTEM_PROMPT,
    INTENT_EXTRACTION_PROMPT,
)
from sirius.ai.schemas.resolver_outcome import (
    ErrorOutcome,
    ResolverOutcome,
    fallback_outcome,
    normalize_reply,
)

logger = logging.getLogger("sirius.ai.intent")

UPSTREAM_ERROR_MESSAGE = "I couldn't reach the language model right now. Please try again in a moment."
UPSTREAM_TIMEOUT_MESSAGE = "The language model took too long to respond. Please try again."


class IntentResolver:
    """
    Classifies natural language into a ResolverOutcome.

    The provider is injected so tests can feed canned replies:

        resolver = IntentResolver(provider=fake_provider)
        outcome = await resolver.classify("turn on the garage light")

        if isinstance(outcome, ActionOutcome):
            print(outcome.command.target)   # "garage_led"
    """

    def __init__(self, provider: AIProvider = None, timeout: float = None):
        self.provider = provider or get_provider()
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT
        logger.info(f"Intent resolver initialized ({self.provider.provider_type.value})")

    async def classify(self, text: str, request_id: Optional[str] = None) -> ResolverOutcome:
        """
        Resolve one utterance (wake word already stripped).

        Args:
            text: The command text
            request_id: Optional tracing ID

        Returns:
            Exactly one ResolverOutcome

        Raises:
            InputError: If text is empty or whitespace-only
        """
        if text is None or not text.strip():
            raise InputError("User input is required.")

        text = text.strip()
        request_id = request_id or uuid.uuid4().hex[:12]
        start_time = time.time()
        logger.info(f"[{request_id}] Resolving: {text[:50]}")

        prompt = INTENT_EXTRACTION_PROMPT.format(request=text)

        try:
            response = await asyncio.wait_for(
                self.provider.generate_json(
                    prompt=prompt,
                    system_prompt=INTENT_SYSTEM_PROMPT,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"[{request_id}] Model call timed out after {self.timeout}s")
            ai_monitor.track_response(request_id, self._failed_response("timeout", start_time))
            return self._upstream_error(request_id, text, UPSTREAM_TIMEOUT_MESSAGE, start_time)
        except Exception as e:
            logger.error(f"[{request_id}] Model call failed: {e}", exc_info=True)
            ai_monitor.track_response(request_id, self._failed_response(str(e), start_time))
            return self._upstream_error(request_id, text, UPSTREAM_ERROR_MESSAGE, start_time)

        ai_monitor.track_response(request_id, response)

        if not response.success:
            logger.warning(f"[{request_id}] Model unavailable: {response.error}")
            return self._upstream_error(request_id, text, UPSTREAM_ERROR_MESSAGE, start_time)

        fallback = False
        try:
            outcome = normalize_reply(response.content, strict=True)
        except MalformedModelReply:
            outcome = fallback_outcome()
            fallback = True

        processing_time = (time.time() - start_time) * 1000
        ai_monitor.track_outcome(request_id, text, outcome.type, processing_time, fallback=fallback)
        logger.info(f"[{request_id}] Resolved to '{outcome.type}' in {processing_time:.0f}ms")
        return outcome

    def _failed_response(self, error: str, start_time: float) -> AIResponse:
        """Stand-in response so calls that never returned still count as failed requests."""
        return AIResponse(
            content="",
            provider=self.provider.provider_type,
            model=str(getattr(self.provider, "model", "unknown")),
            latency_ms=(time.time() - start_time) * 1000,
            success=False,
            error=error,
        )

    def _upstream_error(
        self,
        request_id: str,
        text: str,
        message: str,
        start_time: float,
    ) -> ErrorOutcome:
        outcome = ErrorOutcome(message=message, code=ErrorKind.UPSTREAM_MODEL_ERROR)
        processing_time = (time.time() - start_time) * 1000
        ai_monitor.track_outcome(request_id, text, outcome.type, processing_time)
        return outcome


intent_resolver = IntentResolver()
