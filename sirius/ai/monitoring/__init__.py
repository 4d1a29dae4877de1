"""
Monitoring Module - logging and metrics for model calls and dispatches.

Usage:
======
    from sirius.ai.monitoring import ai_monitor

    ai_monitor.track_response(request_id, response)
    stats = ai_monitor.get_stats()
"""

from sirius.ai.monitoring.monitor import AIMonitor, AggregatedMetrics, ai_monitor

__all__ = [
    "AIMonitor",
    "AggregatedMetrics",
    "ai_monitor",
]
