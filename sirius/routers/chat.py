"""
Chat Router - natural language entry points.

    POST /api/chat        text (wake word already stripped) -> ResolverOutcome
    POST /api/assistant   raw utterance -> gate, resolve, dispatch, reply
    GET  /api/chat/stats  model-call statistics

Architecture:
=============
```
┌─────────────────┐
│ "Sirius, open   │
│  the garage"    │
└────────┬────────┘
         │
         ▼
┌─────────────────┐
│  Chat Router    │  ← HTTP handling only (this file)
└────────┬────────┘
         │
         ▼
┌─────────────────┐
│AssistantService │  ← Gate, resolver, device dispatch
└─────────────────┘
```
"""

import logging
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from sirius.core.errors import InputError
from sirius.ai.intent.parser import IntentResolver
from sirius.ai.monitoring import ai_monitor
from sirius.ai.schemas.resolver_outcome import ResolverOutcome
from sirius.deps import get_assistant_service, get_device_session, get_intent_resolver
from sirius.services.assistant_service import AssistantService
from sirius.services.device_session import DeviceSession


# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger("sirius.routers.chat")


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/api", tags=["chat"])


# ---------------------------------------------------------------------------
# REQUEST/RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class ChatRequest(BaseModel):
    """
    Request schema for /api/chat.

    Example:
    {
        "message": "turn on the garage light"
    }
    """
    message: str = Field(default="", description="Command text")


class AssistantRequest(BaseModel):
    """
    Request schema for /api/assistant.

    Example:
    {
        "message": "Hey Sirius, close the window",
        "source": "voice"
    }
    """
    message: str = Field(default="", description="Raw utterance, wake word included")
    source: Literal["text", "voice"] = Field(default="text", description="Which front-end sent it")


class AssistantResponse(BaseModel):
    """Response schema for /api/assistant."""
    addressed: bool
    gate_status: str
    reply: str
    outcome: Optional[Dict[str, Any]] = None
    dispatch: Optional[Dict[str, Any]] = None
    source: str
    request_id: Optional[str] = None
    processing_time_ms: Optional[float] = None


class AIStatsResponse(BaseModel):
    """Response schema for /api/chat/stats."""
    total_requests: int
    successful_requests: int
    failed_requests: int
    success_rate: str
    total_tokens: int
    avg_latency_ms: float
    fallback_replies: int
    requests_by_provider: Dict[str, int]
    outcomes_by_type: Dict[str, int]
    commands_sent: int
    commands_failed: int


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("/chat", response_model=ResolverOutcome)
async def chat(
    request: ChatRequest,
    resolver: IntentResolver = Depends(get_intent_resolver),
):
    """
    Classify one command.

    Always answers with exactly one of the four outcome shapes
    (action, conversation, clarification, error). Model failures come
    back as an error outcome with code "upstream_model_error".
    """
    try:
        return await resolver.classify(request.message)
    except InputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.post("/assistant", response_model=AssistantResponse)
async def assistant(
    request: AssistantRequest,
    service: AssistantService = Depends(get_assistant_service),
    session: DeviceSession = Depends(get_device_session),
):
    """
    Full pipeline used by the text and voice front-ends.

    Utterances without the wake word come back with addressed=false and
    an empty reply; nothing is sent to the model.
    """
    if not request.message or not request.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is required")

    try:
        result = await service.process(request.message, session, source=request.source)
    except InputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    return AssistantResponse(**result.to_dict())


@router.get("/chat/stats", response_model=AIStatsResponse)
async def get_ai_stats():
    """
    Model usage since the process started: requests, failures, tokens,
    latency, fallback replies, outcome mix and device commands sent.
    """
    return AIStatsResponse(**ai_monitor.get_stats().to_dict())
