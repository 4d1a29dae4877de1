"""
Connection State - what the server currently knows about the device.

One ConnectionState belongs to one DeviceSession. It is never module-global,
so each app instance (and each test) works with its own copy.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger("sirius.services.connection_state")

_WHITESPACE_RE = re.compile(r"\s+")
_NON_AUTHORITY_CHARS = set("/?#@")


@dataclass
class ConnectionState:
    """
    Device address plus reachability as of the last probe.

    Attributes:
        device_address: Host or host:port of the board, None when unset
        reachable: Whether the last probe succeeded
        last_snapshot: Body of the last successful GET /api/status
        last_checked: When reachability was last updated
    """
    device_address: Optional[str] = None
    reachable: bool = False
    last_snapshot: Optional[Dict[str, Any]] = None
    last_checked: Optional[datetime] = None

    def set_address(self, address: str) -> str:
        """
        Store a new address with all whitespace removed.

        A new address has not been probed yet, so reachability and the
        snapshot are reset.

        Raises:
            ValueError: Empty address, or not a usable host[:port]
        """
        normalized = _WHITESPACE_RE.sub("", address or "")
        if not normalized:
            raise ValueError("Device address cannot be empty")
        _validate_authority(normalized)

        self.device_address = normalized
        self.reachable = False
        self.last_snapshot = None
        self.last_checked = None
        logger.info(f"Device address set to {normalized}")
        return normalized

    def clear(self) -> None:
        """Forget the address and everything learned about it."""
        self.device_address = None
        self.reachable = False
        self.last_snapshot = None
        self.last_checked = None

    def mark_reachable(self, snapshot: Optional[Dict[str, Any]] = None) -> None:
        self.reachable = True
        if snapshot is not None:
            self.last_snapshot = snapshot
        self.last_checked = datetime.now(timezone.utc)

    def mark_unreachable(self) -> None:
        self.reachable = False
        self.last_checked = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.device_address,
            "reachable": self.reachable,
            "last_snapshot": self.last_snapshot,
            "last_checked": self.last_checked.isoformat() if self.last_checked else None,
        }


def _validate_authority(address: str) -> None:
    """Accept only host or host:port, the way the gateway builds its URLs."""
    if _NON_AUTHORITY_CHARS & set(address):
        raise ValueError(f"Invalid device address '{address}': use host or host:port")
    try:
        url = httpx.URL(f"http://{address}/")
    except httpx.InvalidURL as e:
        raise ValueError(f"Invalid device address '{address}': {e}") from e
    if not url.host:
        raise ValueError(f"Invalid device address '{address}': missing host")
