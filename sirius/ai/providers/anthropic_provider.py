"""
Anthropic Provider - Claude client.

Alternative classifier selected with LLM_PROVIDER=anthropic.
Claude has no native JSON mode, so generate_json() relies on
instructions; stray prose or markdown fences are cleaned up later
by the resolver's reply normalization.

API Documentation: https://docs.anthropic.com/en/api
"""

import logging
import time
from typing import Optional

from anthropic import AsyncAnthropic

from sirius.core.config import settings
from sirius.ai.providers.base import (
    AIProvider,
    AIResponse,
    ProviderType,
    TokenUsage
)

logger = logging.getLogger("sirius.ai.anthropic")


class AnthropicProvider(AIProvider):
    """
    Anthropic Claude provider implementation.

    Usage:
        provider = AnthropicProvider()
        response = await provider.generate_json('User query: "beep the buzzer"')
    """

    provider_type = ProviderType.ANTHROPIC

    def __init__(self, model: str = None, api_key: str = None, timeout: float = None):
        """
        Initialize the Anthropic provider.

        Args:
            model: Model name (default: from settings.ANTHROPIC_MODEL)
            api_key: API key (default: from settings.ANTHROPIC_API_KEY)
            timeout: Request timeout in seconds (default: settings.AI_REQUEST_TIMEOUT)
        """
        self.model = model or settings.ANTHROPIC_MODEL
        self.api_key = api_key or settings.ANTHROPIC_API_KEY
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT

        if self.api_key:
            self._client = AsyncAnthropic(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )
            logger.info(f"Anthropic provider initialized with model: {self.model}")
        else:
            self._client = None
            logger.warning("Anthropic API key not configured - provider unavailable")

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """Generate a JSON response using Claude."""
        json_system = system_prompt or ""
        json_system += (
            "\n\nIMPORTANT: You must respond with valid JSON only. "
            "No explanation, no markdown code blocks - just the raw JSON object."
        )

        request_params = {
            "model": self.model,
            "max_tokens": 1024,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.2,
            "system": json_system,
        }

        return await self._create(request_params)

    async def _create(self, request_params: dict) -> AIResponse:
        start_time = time.time()

        if not self._client:
            return self._create_error_response(
                error="Anthropic API key not configured",
                model=self.model,
                latency_ms=self._measure_latency(start_time)
            )

        try:
            response = await self._client.messages.create(**request_params)

            latency_ms = self._measure_latency(start_time)

            # Claude returns a list of content blocks
            content = ""
            if response.content:
                for block in response.content:
                    if hasattr(block, 'text'):
                        content += block.text

            usage = TokenUsage(
                prompt_tokens=response.usage.input_tokens if response.usage else 0,
                completion_tokens=response.usage.output_tokens if response.usage else 0,
            )

            logger.info(f"Anthropic request completed in {latency_ms:.0f}ms, tokens: {usage.total_tokens}")

            return AIResponse(
                content=content.strip(),
                provider=self.provider_type,
                model=self.model,
                usage=usage,
                latency_ms=latency_ms,
                success=True,
                raw_response=response,
            )

        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            logger.error(f"Anthropic generation failed: {e}")
            return self._create_error_response(
                error=str(e),
                model=self.model,
                latency_ms=latency_ms
            )


anthropic_provider = AnthropicProvider()
