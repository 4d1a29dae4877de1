"""
Error taxonomy for the assistant.

Every failure path ends in a readable message, and the kind tells the
caller WHY it failed:

    INPUT_ERROR            empty utterance, rejected before any network call
    UNSUPPORTED_ACTION     the model understood, but no device can do it
    UPSTREAM_MODEL_ERROR   model unreachable, non-2xx, or timed out
    MALFORMED_MODEL_REPLY  model replied with something that is not the JSON shape
    DEVICE_UNREACHABLE     address unset, last probe failed, or connection refused
    DEVICE_TIMEOUT         command sent but no timely response
    DEVICE_REJECTED        device replied non-2xx

Only InputError and configuration problems are raised as exceptions to
the HTTP layer. Model- and device-facing failures are recovered into
structured results (ResolverOutcome / DeviceResult) carrying an ErrorKind.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Machine-readable failure causes."""
    INPUT_ERROR = "input_error"
    UNSUPPORTED_ACTION = "unsupported_action"
    UPSTREAM_MODEL_ERROR = "upstream_model_error"
    MALFORMED_MODEL_REPLY = "malformed_model_reply"
    DEVICE_UNREACHABLE = "device_unreachable"
    DEVICE_TIMEOUT = "device_timeout"
    DEVICE_REJECTED = "device_rejected"


class SiriusError(Exception):
    """Base class for errors raised by the assistant."""

    kind: Optional[ErrorKind] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(SiriusError):
    """Raised when an utterance is empty or whitespace-only."""
    kind = ErrorKind.INPUT_ERROR


class MalformedModelReply(SiriusError):
    """
    Raised by strict reply normalization when the model output
    is not one of the four response shapes.

    In normal operation this never escapes: the resolver replaces
    the reply with a fallback conversation outcome.
    """
    kind = ErrorKind.MALFORMED_MODEL_REPLY


class ConfigurationError(SiriusError):
    """Raised for invalid configuration (e.g. unknown LLM provider)."""
    pass
