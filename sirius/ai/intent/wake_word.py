"""
Wake-Word Gate - decides whether an utterance is addressed to Sirius.

Speech-to-text rarely spells a name the same way twice ("Sirius",
"serious", "Cyrus"...), so matching is fuzzy and per token:

1. Split the utterance on whitespace
2. Compare each token (punctuation stripped, lower-cased) with every
   known spelling using Levenshtein distance
3. Accept when distance <= ceil(threshold * len(spelling))

On a match, the matched token and an immediately preceding carrier word
("hey", "ok", ...) are removed and the rest is the command.

Three outcomes, because they mean different things to the user:
    ADDRESSED       "sirius open the garage"  -> command "open the garage"
    NO_COMMAND      "hey sirius"              -> ask the user for a command
    NOT_ADDRESSED   "open the garage"         -> silently ignored

Matching is per token, so the name anywhere in the sentence triggers
("please sirius open the garage"). That permissiveness is intentional.
"""

import logging
import math
import string
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from rapidfuzz.distance import Levenshtein

from sirius.core.config import settings

logger = logging.getLogger("sirius.ai.wake_word")

DEFAULT_CARRIERS = ("hey", "ok", "okay", "hi", "hello")

_STRIP_CHARS = string.punctuation + string.whitespace


class GateStatus(str, Enum):
    """Result of gating one utterance."""
    ADDRESSED = "addressed"
    NO_COMMAND = "no_command"
    NOT_ADDRESSED = "not_addressed"


@dataclass
class GateResult:
    """
    Outcome of WakeWordGate.check().

    Attributes:
        status: See GateStatus
        remainder: The command text with the wake word removed
                   (empty unless status is ADDRESSED)
        matched: The spelling that matched, if any
    """
    status: GateStatus
    remainder: str = ""
    matched: Optional[str] = None

    @property
    def addressed(self) -> bool:
        """True when the utterance was directed at the assistant."""
        return self.status != GateStatus.NOT_ADDRESSED


class WakeWordGate:
    """
    Fuzzy, per-token wake-word detector.

    Usage:
        gate = WakeWordGate(["sirius", "serious"])
        result = gate.check("Hey Sirius, open the garage")
        # result.status == GateStatus.ADDRESSED
        # result.remainder == "open the garage"
    """

    def __init__(
        self,
        variants: Iterable[str],
        threshold: float = 0.3,
        carriers: Iterable[str] = DEFAULT_CARRIERS,
    ):
        self.variants: List[str] = [v.strip().lower() for v in variants if v and v.strip()]
        if not self.variants:
            raise ValueError("At least one wake-word spelling is required")
        self.threshold = threshold
        self.carriers = {c.lower() for c in carriers}

    @classmethod
    def from_settings(cls) -> "WakeWordGate":
        """Build a gate from WAKE_WORD / WAKE_WORD_VARIANTS / WAKE_WORD_THRESHOLD."""
        variants = [settings.WAKE_WORD, *settings.WAKE_WORD_VARIANTS]
        # dict.fromkeys keeps order and drops duplicates
        return cls(dict.fromkeys(v.lower() for v in variants), threshold=settings.WAKE_WORD_THRESHOLD)

    def max_distance(self, variant: str) -> int:
        """Largest edit distance still accepted for a spelling."""
        return math.ceil(self.threshold * len(variant))

    def match_token(self, token: str) -> Optional[str]:
        """
        Return the spelling a single token matches, or None.

        The token is compared lower-cased with surrounding punctuation removed.
        """
        word = token.strip(_STRIP_CHARS).lower()
        if not word:
            return None
        for variant in self.variants:
            if Levenshtein.distance(word, variant) <= self.max_distance(variant):
                return variant
        return None

    def check(self, text: str) -> GateResult:
        """Gate one utterance."""
        tokens = (text or "").split()

        for index, token in enumerate(tokens):
            matched = self.match_token(token)
            if matched is None:
                continue

            start = index
            if index > 0 and tokens[index - 1].strip(_STRIP_CHARS).lower() in self.carriers:
                start = index - 1

            remainder = " ".join(tokens[:start] + tokens[index + 1:]).lstrip(_STRIP_CHARS)
            remainder = remainder.rstrip()

            if not remainder:
                logger.debug(f"Wake word '{matched}' heard with no command")
                return GateResult(status=GateStatus.NO_COMMAND, matched=matched)

            logger.debug(f"Wake word '{matched}' matched token {token!r}")
            return GateResult(status=GateStatus.ADDRESSED, remainder=remainder, matched=matched)

        return GateResult(status=GateStatus.NOT_ADDRESSED)
