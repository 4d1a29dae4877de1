"""
OpenAI Provider - GPT client.

Alternative classifier selected with LLM_PROVIDER=openai. Uses the
Chat Completions API in JSON mode for command classification.

API Documentation: https://platform.openai.com/docs/api-reference
"""

import logging
import time
from typing import Optional

from openai import AsyncOpenAI

from sirius.core.config import settings
from sirius.ai.providers.base import (
    AIProvider,
    AIResponse,
    ProviderType,
    TokenUsage
)

logger = logging.getLogger("sirius.ai.openai")


class OpenAIProvider(AIProvider):
    """
    OpenAI GPT provider implementation.

    Usage:
        provider = OpenAIProvider()
        response = await provider.generate_json(
            prompt='User query: "open the garage"',
            system_prompt="Reply with one JSON object",
        )
    """

    provider_type = ProviderType.OPENAI

    def __init__(self, model: str = None, api_key: str = None, timeout: float = None):
        """
        Initialize the OpenAI provider.

        Args:
            model: Model name (default: from settings.OPENAI_MODEL)
            api_key: API key (default: from settings.OPENAI_API_KEY)
            timeout: Request timeout in seconds (default: settings.AI_REQUEST_TIMEOUT)
        """
        self.model = model or settings.OPENAI_MODEL
        self.api_key = api_key or settings.OPENAI_API_KEY
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT

        if self.api_key:
            # max_retries=0: one attempt per utterance
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )
            logger.info(f"OpenAI provider initialized with model: {self.model}")
        else:
            self._client = None
            logger.warning("OpenAI API key not configured - provider unavailable")

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """
        Generate a JSON response using OpenAI's JSON mode.

        The content is NOT validated here; see AIProvider.generate_json.
        """
        system_content = system_prompt or ""
        system_content += "\n\nYou must respond with valid JSON only, no explanation."
        messages = [
            {"role": "system", "content": system_content},
            {"role": "user", "content": prompt},
        ]

        return await self._complete(
            messages,
            temperature=0.2,
            max_tokens=1024,
            response_format={"type": "json_object"},
        )

    async def _complete(self, messages, **params) -> AIResponse:
        start_time = time.time()

        if not self._client:
            return self._create_error_response(
                error="OpenAI API key not configured",
                model=self.model,
                latency_ms=self._measure_latency(start_time)
            )

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                **params,
            )

            latency_ms = self._measure_latency(start_time)
            content = response.choices[0].message.content or ""

            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
                completion_tokens=response.usage.completion_tokens if response.usage else 0,
            )

            logger.info(f"OpenAI request completed in {latency_ms:.0f}ms, tokens: {usage.total_tokens}")

            return AIResponse(
                content=content,
                provider=self.provider_type,
                model=self.model,
                usage=usage,
                latency_ms=latency_ms,
                success=True,
                raw_response=response,
            )

        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            logger.error(f"OpenAI generation failed: {e}")
            return self._create_error_response(
                error=str(e),
                model=self.model,
                latency_ms=latency_ms
            )


openai_provider = OpenAIProvider()
