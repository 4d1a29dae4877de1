"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Canned model replies (AIResponse factories, fake provider)
- Fake device board (httpx.MockTransport behind a real DeviceGateway)
- Test client (FastAPI TestClient with dependency overrides)

No test touches the network: the model is a mock and the device is
served by an in-process transport.
"""

import json
from typing import Any, Callable, Dict, Generator, List
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from sirius.ai.intent.parser import IntentResolver
from sirius.ai.intent.wake_word import WakeWordGate
from sirius.ai.monitoring import ai_monitor
from sirius.ai.providers.base import AIResponse, ProviderType, TokenUsage
from sirius.deps import get_device_session, get_intent_resolver, get_wake_word_gate
from sirius.main import app
from sirius.services.device_gateway import DeviceGateway
from sirius.services.device_session import DeviceSession


WAKE_VARIANTS = ["sirius"]


# ---------------------------------------------------------------------------
# MONITOR ISOLATION
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def reset_monitor():
    """The monitor is process-wide; start every test from zero."""
    ai_monitor.reset()
    yield
    ai_monitor.reset()


# ---------------------------------------------------------------------------
# MODEL FIXTURES
# ---------------------------------------------------------------------------

def make_ai_response(content: str = "", success: bool = True, error: str = None) -> AIResponse:
    """Build an AIResponse as a provider would return it."""
    return AIResponse(
        content=content,
        provider=ProviderType.GEMINI,
        model="gemini-test",
        usage=TokenUsage(prompt_tokens=40, completion_tokens=12),
        latency_ms=120.0,
        success=success,
        error=error,
    )


def make_fake_provider(reply: Any) -> MagicMock:
    """
    A provider whose generate_json returns `reply`.

    `reply` may be a raw string (wrapped in a successful AIResponse),
    an AIResponse, or an AsyncMock side_effect callable.
    """
    provider = MagicMock()
    provider.provider_type = ProviderType.GEMINI
    if isinstance(reply, AIResponse):
        provider.generate_json = AsyncMock(return_value=reply)
    elif callable(reply):
        provider.generate_json = AsyncMock(side_effect=reply)
    else:
        provider.generate_json = AsyncMock(return_value=make_ai_response(reply))
    return provider


@pytest.fixture
def ai_response() -> Callable[..., AIResponse]:
    return make_ai_response


@pytest.fixture
def provider_factory() -> Callable[[Any], MagicMock]:
    return make_fake_provider


@pytest.fixture
def action_reply() -> str:
    return json.dumps({"type": "action", "command": {"action": "on", "target": "garage_led"}})


@pytest.fixture
def wake_gate() -> WakeWordGate:
    return WakeWordGate(WAKE_VARIANTS, threshold=0.3)


# ---------------------------------------------------------------------------
# DEVICE FIXTURES
# ---------------------------------------------------------------------------

class FakeBoard:
    """
    In-process stand-in for the home-automation board.

    Records every request and answers from a route table:
        board.routes[("GET", "/api/garage/open")] = (200, {"message": "Garage opening"})
    Unrouted requests get 404.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[tuple, tuple] = {
            ("GET", "/api/status"): (200, {"garage": "closed", "garage_led": "off"}),
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, body = self.routes.get((request.method, request.url.path), (404, {"message": "Not found"}))
        return httpx.Response(status_code, json=body)

    @property
    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def board() -> FakeBoard:
    return FakeBoard()


@pytest.fixture
def make_session(board: FakeBoard) -> Callable[..., DeviceSession]:
    """Factory for sessions wired to the fake board (or a custom handler)."""
    def _make(handler=None, command_timeout: float = 1.0, probe_timeout: float = 0.5) -> DeviceSession:
        transport = httpx.MockTransport(handler or board.handler)
        gateway = DeviceGateway(
            command_timeout=command_timeout,
            probe_timeout=probe_timeout,
            transport=transport,
        )
        return DeviceSession(gateway)
    return _make


@pytest.fixture
def session(make_session) -> DeviceSession:
    """A session with an address set but not yet probed."""
    device_session = make_session()
    device_session.set_address("192.168.1.50")
    return device_session


# ---------------------------------------------------------------------------
# TEST CLIENT
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_provider(action_reply) -> MagicMock:
    return make_fake_provider(action_reply)


@pytest.fixture
def client(session: DeviceSession, fake_provider: MagicMock, wake_gate: WakeWordGate) -> Generator[TestClient, None, None]:
    """
    Test client with the device session and model replaced.

    Tests change the model reply through fake_provider.generate_json.
    """
    resolver = IntentResolver(provider=fake_provider, timeout=1.0)

    app.dependency_overrides[get_device_session] = lambda: session
    app.dependency_overrides[get_intent_resolver] = lambda: resolver
    app.dependency_overrides[get_wake_word_gate] = lambda: wake_gate

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
