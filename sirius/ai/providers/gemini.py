"""
Gemini Provider - Google's GenAI SDK.

Default classifier for the assistant: Gemini Flash is fast and cheap,
which matters when every spoken command waits on it.
"""

import logging
import time
from typing import Optional

from google import genai
from google.genai import types

from sirius.core.config import settings
from sirius.ai.providers.base import (
    AIProvider,
    AIResponse,
    ProviderType,
    TokenUsage
)

logger = logging.getLogger("sirius.ai.gemini")


class GeminiProvider(AIProvider):
    provider_type = ProviderType.GEMINI

    def __init__(self, model: str = None, api_key: str = None, timeout: float = None):
        self.model = model or settings.GEMINI_MODEL
        self.api_key = api_key or settings.GEMINI_API_KEY
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT

        if self.api_key:
            # HttpOptions.timeout is expressed in milliseconds
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
            logger.info(f"Gemini provider initialized with model: {self.model}")
        else:
            self._client = None
            logger.warning("Gemini API key not configured")

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        start_time = time.time()

        if not self._client:
            return self._error("Gemini API key not configured", start_time)

        try:
            config = types.GenerateContentConfig(
                temperature=0.2,
                max_output_tokens=1024,
                response_mime_type="application/json",
                system_instruction=system_prompt,
            )

            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )

            return self._build_response(response, start_time)

        except Exception as e:
            logger.error(f"Gemini JSON generation failed: {e}")
            return self._error(str(e), start_time)

    # --- private helpers ---

    def _build_response(self, response, start_time: float) -> AIResponse:
        latency_ms = self._measure_latency(start_time)
        usage = self._extract_usage(response)

        logger.info(f"Gemini request completed in {latency_ms:.0f}ms, tokens: {usage.total_tokens}")

        return AIResponse(
            content=(response.text or "").strip(),
            provider=self.provider_type,
            model=self.model,
            usage=usage,
            latency_ms=latency_ms,
            success=True,
            raw_response=response,
        )

    def _extract_usage(self, response) -> TokenUsage:
        # The SDK reports None when usage is not available
        metadata = response.usage_metadata
        prompt_t = (metadata.prompt_token_count or 0) if metadata else 0
        comp_t = (metadata.candidates_token_count or 0) if metadata else 0
        return TokenUsage(prompt_tokens=prompt_t, completion_tokens=comp_t)

    def _error(self, msg: str, start_time: float) -> AIResponse:
        return self._create_error_response(
            error=msg, model=self.model, latency_ms=self._measure_latency(start_time)
        )


gemini_provider = GeminiProvider()
