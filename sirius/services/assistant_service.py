"""
Assistant Service - the full utterance-to-reply pipeline.

Used by both front-ends (typed chat and voice after speech-to-text):

    utterance
       │
       ▼
    WakeWordGate ──── not addressed ──► ignored (no model call)
       │      └────── name only ──────► "what is your command?"
       ▼
    IntentResolver ─── conversation / clarification / error ──► reply
       │
       ▼ action
    DeviceSession ──── not reachable ─► "device is not connected" (no device call)
       │
       ▼
    reply = acknowledgement + device feedback

NOT Responsible For:
====================
- HTTP request/response handling (router's job)
- Speech capture and synthesis (browser's job)
"""

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sirius.core.config import settings
from sirius.ai.intent.parser import IntentResolver
from sirius.ai.intent.wake_word import GateResult, GateStatus, WakeWordGate
from sirius.ai.monitoring import ai_monitor
from sirius.ai.schemas.resolver_outcome import ActionOutcome, ResolverOutcome
from sirius.services.commands import describe, target_label
from sirius.services.device_gateway import DeviceResult
from sirius.services.device_session import DeviceSession

logger = logging.getLogger("sirius.services.assistant")

NO_COMMAND_REPLY = "I heard Sirius, but what is your command?"
NOT_CONNECTED_REPLY = (
    "I understood you want to '{action} {target}', but the device is not connected. "
    "Please check the address and connection status."
)
NOT_CONFIGURED_REPLY = (
    "I understood you want to '{action} {target}', but no device address is configured. "
    "Please set the device address first."
)


@dataclass
class AssistantResult:
    """
    What one utterance turned into.

    Attributes:
        addressed: False when the wake word was required and absent
        gate_status: Raw gate decision
        outcome: The resolver outcome, when the model was consulted
        dispatch: The device result for an action outcome (gated when unreachable)
        reply: Readable text to display and optionally speak ("" when ignored)
        source: "text" or "voice"
        request_id: Tracing ID shared with the monitor logs
    """
    addressed: bool
    gate_status: GateStatus
    reply: str = ""
    outcome: Optional[ResolverOutcome] = None
    dispatch: Optional[DeviceResult] = None
    source: str = "text"
    request_id: Optional[str] = None
    processing_time_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "addressed": self.addressed,
            "gate_status": self.gate_status.value,
            "reply": self.reply,
            "outcome": self.outcome.model_dump(mode="json") if self.outcome is not None else None,
            "dispatch": self.dispatch.to_dict() if self.dispatch is not None else None,
            "source": self.source,
            "request_id": self.request_id,
            "processing_time_ms": self.processing_time_ms,
        }


class AssistantService:
    """
    Wires the gate, the resolver and a device session together.

    Usage:
        service = AssistantService(WakeWordGate.from_settings(), intent_resolver)
        result = await service.process("sirius open the garage", session)
        print(result.reply)
    """

    def __init__(
        self,
        gate: WakeWordGate,
        resolver: IntentResolver,
        require_wake_word: bool = None,
    ):
        self.gate = gate
        self.resolver = resolver
        self.require_wake_word = (
            settings.WAKE_WORD_REQUIRED if require_wake_word is None else require_wake_word
        )

    async def process(self, text: str, session: DeviceSession, source: str = "text") -> AssistantResult:
        """
        Run one utterance through the whole pipeline.

        Raises:
            InputError: If the command text (after the wake word) is empty
                        and the wake word is not required
        """
        request_id = uuid.uuid4().hex[:12]
        start_time = time.time()
        logger.info(f"[{request_id}] {source} utterance: {(text or '')[:50]}")

        gate = self._gate(text)

        if gate.status == GateStatus.NOT_ADDRESSED:
            logger.info(f"[{request_id}] Not addressed, ignoring")
            return self._finish(AssistantResult(addressed=False, gate_status=gate.status), request_id, source, start_time)

        if gate.status == GateStatus.NO_COMMAND:
            return self._finish(
                AssistantResult(addressed=True, gate_status=gate.status, reply=NO_COMMAND_REPLY),
                request_id, source, start_time,
            )

        outcome = await self.resolver.classify(gate.remainder, request_id=request_id)
        result = AssistantResult(addressed=True, gate_status=gate.status, outcome=outcome)

        if not isinstance(outcome, ActionOutcome):
            result.reply = outcome.message
            return self._finish(result, request_id, source, start_time)

        command = outcome.command
        if not session.is_reachable:
            logger.info(f"[{request_id}] Device not reachable, '{describe(command)}' not sent")
            # Gated by the session: no network call, DEVICE_UNREACHABLE result
            result.dispatch = await session.send_command(command)
            template = NOT_CONNECTED_REPLY if session.get_address() else NOT_CONFIGURED_REPLY
            result.reply = template.format(action=command.action, target=command.target)
            return self._finish(result, request_id, source, start_time)

        dispatch = await session.send_command(command)
        ai_monitor.track_command(
            request_id,
            describe(command),
            dispatch.success,
            error=dispatch.error.value if dispatch.error else None,
        )

        result.dispatch = dispatch
        result.reply = self._compose_action_reply(outcome, dispatch)
        return self._finish(result, request_id, source, start_time)

    # -------------------------------------------------------------------------
    # HELPERS
    # -------------------------------------------------------------------------

    def _gate(self, text: str) -> GateResult:
        if not self.require_wake_word:
            return GateResult(status=GateStatus.ADDRESSED, remainder=(text or "").strip())
        return self.gate.check(text)

    @staticmethod
    def _compose_action_reply(outcome: ActionOutcome, dispatch: DeviceResult) -> str:
        """Model acknowledgement (if any) followed by the device's feedback."""
        command = outcome.command
        if dispatch.success:
            ack = outcome.message or f"Done: {describe(command)}."
            return f"{ack} {dispatch.message}".strip()
        return f"I couldn't {command.action} the {target_label(command)}: {dispatch.message}"

    @staticmethod
    def _finish(result: AssistantResult, request_id: str, source: str, start_time: float) -> AssistantResult:
        result.request_id = request_id
        result.source = source
        result.processing_time_ms = (time.time() - start_time) * 1000
        return result
