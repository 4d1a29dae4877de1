"""AI Schemas package - Structured response schemas."""

from sirius.ai.schemas.resolver_outcome import (
    ActionOutcome,
    ConversationOutcome,
    ClarificationOutcome,
    ErrorOutcome,
    ResolverOutcome,
    OutcomeType,
    FALLBACK_MESSAGE,
    extract_json_object,
    fallback_outcome,
    normalize_reply,
)

__all__ = [
    "ActionOutcome",
    "ConversationOutcome",
    "ClarificationOutcome",
    "ErrorOutcome",
    "ResolverOutcome",
    "OutcomeType",
    "FALLBACK_MESSAGE",
    "extract_json_object",
    "fallback_outcome",
    "normalize_reply",
]
