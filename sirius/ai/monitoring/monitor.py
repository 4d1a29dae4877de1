"""
AI Monitor - Unified logging and metrics tracking for the assistant.

One call per event both writes a structured JSON log line and updates
in-memory counters:

    ai_monitor.track_response(request_id, ai_response)
    ai_monitor.track_outcome(request_id, text, outcome.type, processing_ms)
    ai_monitor.track_command(request_id, "on garage_led", success=True)

    stats = ai_monitor.get_stats()

Counters live in process memory and reset on restart.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, Optional

from sirius.ai.providers.base import AIResponse

logger = logging.getLogger("sirius.ai.monitor")


@dataclass
class AggregatedMetrics:
    """Aggregated metrics since process start."""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_tokens: int = 0
    total_latency_ms: float = 0.0
    fallback_replies: int = 0
    requests_by_provider: Dict[str, int] = field(default_factory=dict)
    outcomes_by_type: Dict[str, int] = field(default_factory=dict)
    commands_sent: int = 0
    commands_failed: int = 0

    @property
    def avg_latency_ms(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_latency_ms / self.total_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return (self.successful_requests / self.total_requests) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "success_rate": f"{self.success_rate:.1f}%",
            "total_tokens": self.total_tokens,
            "avg_latency_ms": round(self.avg_latency_ms, 2),
            "fallback_replies": self.fallback_replies,
            "requests_by_provider": dict(self.requests_by_provider),
            "outcomes_by_type": dict(self.outcomes_by_type),
            "commands_sent": self.commands_sent,
            "commands_failed": self.commands_failed,
        }


class AIMonitor:
    """Unified AI monitoring: logging + metrics in one call."""

    def __init__(self):
        self._logger = logger
        self._lock = Lock()
        self._aggregated = AggregatedMetrics()

    def track_response(
        self,
        request_id: str,
        response: AIResponse,
    ) -> None:
        """Track a provider response (successful or not)."""
        provider = response.provider.value

        with self._lock:
            agg = self._aggregated
            agg.total_requests += 1
            if response.success:
                agg.successful_requests += 1
            else:
                agg.failed_requests += 1
            agg.total_tokens += response.usage.total_tokens
            agg.total_latency_ms += response.latency_ms
            agg.requests_by_provider[provider] = agg.requests_by_provider.get(provider, 0) + 1

        log_data = {
            "event": "ai_response",
            "request_id": request_id,
            "provider": provider,
            "model": response.model,
            "success": response.success,
            "latency_ms": round(response.latency_ms, 2),
            "tokens": response.usage.total_tokens,
            "response_length": len(response.content) if response.content else 0,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if response.error:
            log_data["error"] = response.error

        level = logging.INFO if response.success else logging.WARNING
        self._logger.log(level, f"AI Response: {json.dumps(log_data)}")

    def track_outcome(
        self,
        request_id: str,
        original_text: str,
        outcome_type: str,
        processing_time_ms: float = 0.0,
        fallback: bool = False,
    ) -> None:
        """Track the normalized outcome of one utterance."""
        with self._lock:
            agg = self._aggregated
            agg.outcomes_by_type[outcome_type] = agg.outcomes_by_type.get(outcome_type, 0) + 1
            if fallback:
                agg.fallback_replies += 1

        log_data = {
            "event": "outcome_resolved",
            "request_id": request_id,
            "outcome_type": outcome_type,
            "fallback": fallback,
            "processing_time_ms": round(processing_time_ms, 2),
            "original_text": original_text[:50] + "..." if len(original_text) > 50 else original_text,
        }
        self._logger.info(f"Outcome: {json.dumps(log_data)}")

    def track_command(
        self,
        request_id: str,
        command: str,
        success: bool,
        error: Optional[str] = None,
    ) -> None:
        """Track a command dispatched to the device."""
        with self._lock:
            self._aggregated.commands_sent += 1
            if not success:
                self._aggregated.commands_failed += 1

        log_data = {"event": "command_sent", "request_id": request_id, "command": command, "success": success}
        if error:
            log_data["error"] = error

        level = logging.INFO if success else logging.WARNING
        self._logger.log(level, f"Command Sent: {json.dumps(log_data)}")

    def get_stats(self) -> AggregatedMetrics:
        """Get current aggregated statistics."""
        with self._lock:
            return self._aggregated

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._aggregated = AggregatedMetrics()


ai_monitor = AIMonitor()
