"""
Intent Module - from utterance to typed outcome.

Example Flow:
============
User says: "Hey Sirius, turn on the garage light"

WakeWordGate strips the wake word:
    "turn on the garage light"

IntentResolver asks the LLM and normalizes the reply:
    ActionOutcome(command=Command(action="on", target="garage_led"))
"""

from sirius.ai.intent.wake_word import GateResult, GateStatus, WakeWordGate
from sirius.ai.intent.parser import IntentResolver, intent_resolver

__all__ = [
    "GateResult",
    "GateStatus",
    "WakeWordGate",
    "IntentResolver",
    "intent_resolver",
]
