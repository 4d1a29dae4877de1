"""
Dependencies module - reusable FastAPI dependencies for route handlers.

The device session lives on app.state (created in the lifespan handler),
so every request of one app instance shares it while separate app
instances, and tests, each get their own. Override these with
app.dependency_overrides to inject fakes.
"""

from functools import lru_cache

from fastapi import Depends, Request

from sirius.ai.intent.parser import IntentResolver, intent_resolver
from sirius.ai.intent.wake_word import WakeWordGate
from sirius.services.assistant_service import AssistantService
from sirius.services.device_session import DeviceSession


def get_device_session(request: Request) -> DeviceSession:
    """The DeviceSession owned by the running application."""
    return request.app.state.device_session


def get_intent_resolver() -> IntentResolver:
    return intent_resolver


@lru_cache
def get_wake_word_gate() -> WakeWordGate:
    """Gate built once from the WAKE_WORD_* settings."""
    return WakeWordGate.from_settings()


def get_assistant_service(
    resolver: IntentResolver = Depends(get_intent_resolver),
    gate: WakeWordGate = Depends(get_wake_word_gate),
) -> AssistantService:
    return AssistantService(gate=gate, resolver=resolver)
