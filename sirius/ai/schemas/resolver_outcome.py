"""
Resolver Outcome Schemas - the closed set of things a command can turn into.

The model is instructed to answer with exactly one JSON object of one of
four shapes:

    {"type": "action", "command": {"action": "on", "target": "garage_led"}}
    {"type": "conversation", "message": "Hello! How can I help?"}
    {"type": "clarification", "message": "Which light? Garage, room 1 or room 2?"}
    {"type": "error", "message": "Sorry, I can't do that."}

Hosted models do not always comply: they wrap the object in markdown
fences, add a sentence before it, or reply with plain prose. This module
validates the reply ONCE, at the boundary, and everything downstream
works with a typed ResolverOutcome instead of re-checking dict keys.

Usage:
======
```python
from sirius.ai.schemas.resolver_outcome import normalize_reply, ActionOutcome

outcome = normalize_reply(model_text)
if isinstance(outcome, ActionOutcome):
    dispatch(outcome.command)
else:
    say(outcome.message)
```
"""

import json
import logging
import re
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from sirius.core.errors import ErrorKind, MalformedModelReply
from sirius.services.commands import Command

logger = logging.getLogger("sirius.ai.resolver_outcome")

# Shown when the model reply cannot be used at all
FALLBACK_MESSAGE = "I had trouble understanding that command. Could you try rephrasing it?"


class OutcomeType(str, Enum):
    """Discriminator values for ResolverOutcome."""
    ACTION = "action"
    CONVERSATION = "conversation"
    CLARIFICATION = "clarification"
    ERROR = "error"


# ---------------------------------------------------------------------------
# OUTCOME VARIANTS
# ---------------------------------------------------------------------------

class _MessageOutcome(BaseModel):
    """Shared validation for the variants that carry a message."""
    message: str = Field(description="Text shown (and optionally spoken) to the user")

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Validate message is not empty."""
        if not v or not v.strip():
            raise ValueError("message cannot be empty")
        return v.strip()


class ActionOutcome(BaseModel):
    """A directive to execute on the device."""
    type: Literal["action"] = OutcomeType.ACTION.value
    command: Command
    message: Optional[str] = Field(
        default=None,
        description="Optional acknowledgement the model chose to include",
    )


class ConversationOutcome(_MessageOutcome):
    """A free-text reply with no device effect."""
    type: Literal["conversation"] = OutcomeType.CONVERSATION.value


class ClarificationOutcome(_MessageOutcome):
    """A question back to the user."""
    type: Literal["clarification"] = OutcomeType.CLARIFICATION.value


class ErrorOutcome(_MessageOutcome):
    """
    The utterance could not be turned into a supported action.

    code tells apart "no device can do that" (the model said so) from
    "the model could not be reached" (set locally by the resolver).
    """
    type: Literal["error"] = OutcomeType.ERROR.value
    code: ErrorKind = ErrorKind.UNSUPPORTED_ACTION


ResolverOutcome = Annotated[
    Union[ActionOutcome, ConversationOutcome, ClarificationOutcome, ErrorOutcome],
    Field(discriminator="type"),
]

_OUTCOME_ADAPTER: TypeAdapter = TypeAdapter(ResolverOutcome)


def fallback_outcome() -> ConversationOutcome:
    """The fixed reply used whenever the model output is unusable."""
    return ConversationOutcome(message=FALLBACK_MESSAGE)


# ---------------------------------------------------------------------------
# REPLY NORMALIZATION
# ---------------------------------------------------------------------------

# A reply that is entirely one fenced block, labelled json or unlabelled
_FENCE_RE = re.compile(r"^\s*```(?:json)?[ \t]*\n?(.*?)\n?\s*```\s*$", re.DOTALL | re.IGNORECASE)

# First "{" to last "}" (greedy)
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def _strip_fence(text: str) -> str:
    match = _FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def extract_json_object(raw: str) -> Dict[str, Any]:
    """
    Pull a JSON object out of a model reply.

    1. Strip a surrounding ```json / ``` fence.
    2. If that is not a JSON object, parse the first greedy {...} span.

    Raises:
        MalformedModelReply: If no JSON object can be recovered
    """
    candidate = _strip_fence(raw or "")
    data = _loads_object(candidate)

    if data is None:
        match = _OBJECT_RE.search(candidate)
        if match:
            data = _loads_object(match.group(0))

    if data is None:
        raise MalformedModelReply("Reply does not contain a JSON object")
    return data


def normalize_reply(raw: str, strict: bool = False) -> ResolverOutcome:
    """
    Turn raw model text into exactly one ResolverOutcome.

    Args:
        raw: Text exactly as the model returned it
        strict: If True, raise MalformedModelReply; if False, return the
                fallback conversation outcome on any problem

    Returns:
        ActionOutcome, ConversationOutcome, ClarificationOutcome or ErrorOutcome

    Example:
        >>> normalize_reply('```json\\n{"type": "conversation", "message": "Hi"}\\n```')
        ConversationOutcome(message='Hi', type='conversation')
    """
    try:
        data = extract_json_object(raw)

        response_type = data.get("type")
        if not isinstance(response_type, str):
            raise MalformedModelReply("Reply has no string 'type' field")

        data = dict(data)
        data["type"] = response_type.strip().lower()
        if data["type"] == OutcomeType.ERROR.value:
            # Only the resolver may mark an error as upstream
            data.pop("code", None)

        try:
            return _OUTCOME_ADAPTER.validate_python(data)
        except ValidationError as e:
            raise MalformedModelReply(f"Reply does not match any response shape: {e.error_count()} error(s)")

    except MalformedModelReply as e:
        logger.warning(f"Malformed model reply ({e.message}): {(raw or '')[:500]!r}")
        if strict:
            raise
        return fallback_outcome()
