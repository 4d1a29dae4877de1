"""
Command vocabulary - the devices the board exposes and how to reach them.

This module is the single source of truth for:
- The closed set of targets (garage, window, door, three LEDs, buzzer)
- Which verbs each target understands (used to build the LLM prompt)
- The REST path each (target, action) pair maps to on the device

Device REST surface:
    GET  /api/status                 current state snapshot
    GET  /api/<target>/<action>      direct control, e.g. /api/garage/open
    POST /api/control                generic fallback, body {action, target}
"""

from enum import Enum
from typing import Dict, List, Optional
from urllib.parse import quote

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# TARGETS
# ---------------------------------------------------------------------------

class DeviceTarget(str, Enum):
    """Actuators wired to the board."""
    GARAGE = "garage"
    WINDOW = "window"
    DOOR = "door"
    GARAGE_LED = "garage_led"
    ROOM1_LED = "room1_led"
    ROOM2_LED = "room2_led"
    BUZZER = "buzzer"


# Verbs each target understands. Rendered into the instruction template;
# the resolver does not enforce it.
SUPPORTED_ACTIONS: Dict[DeviceTarget, List[str]] = {
    DeviceTarget.GARAGE: ["open", "close"],
    DeviceTarget.WINDOW: ["open", "close"],
    DeviceTarget.DOOR: ["open", "close"],
    DeviceTarget.GARAGE_LED: ["on", "off"],
    DeviceTarget.ROOM1_LED: ["on", "off"],
    DeviceTarget.ROOM2_LED: ["on", "off"],
    DeviceTarget.BUZZER: ["on", "off", "beep"],
}

# Friendly names for prompts and user-facing messages
TARGET_LABELS: Dict[DeviceTarget, str] = {
    DeviceTarget.GARAGE: "Garage",
    DeviceTarget.WINDOW: "Window",
    DeviceTarget.DOOR: "Door",
    DeviceTarget.GARAGE_LED: "Garage LED",
    DeviceTarget.ROOM1_LED: "Room 1 LED",
    DeviceTarget.ROOM2_LED: "Room 2 LED",
    DeviceTarget.BUZZER: "Buzzer",
}


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

STATUS_ENDPOINT = "/api/status"
CONTROL_ENDPOINT = "/api/control"

_ENDPOINT_TEMPLATES: Dict[DeviceTarget, str] = {
    DeviceTarget.GARAGE: "/api/garage/{action}",
    DeviceTarget.WINDOW: "/api/window/{action}",
    DeviceTarget.DOOR: "/api/door/{action}",
    DeviceTarget.GARAGE_LED: "/api/led/garage/{action}",
    DeviceTarget.ROOM1_LED: "/api/led/room1/{action}",
    DeviceTarget.ROOM2_LED: "/api/led/room2/{action}",
    DeviceTarget.BUZZER: "/api/buzzer/{action}",
}


# ---------------------------------------------------------------------------
# COMMAND
# ---------------------------------------------------------------------------

class Command(BaseModel):
    """
    A resolved device command.

    Both fields are plain strings: the target is expected to be one of
    DeviceTarget, but an unknown one is still carried through so it can
    be routed via the generic /api/control endpoint.

    Example:
        {"action": "on", "target": "garage_led"}
    """
    action: str = Field(description="Verb to apply (open, close, on, off, beep)")
    target: str = Field(description="Actuator name (garage, room1_led, ...)")

    @field_validator("action", "target")
    @classmethod
    def normalize_token(cls, v: str) -> str:
        """Trim and lower-case; empty values are rejected."""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip().lower()

    @property
    def known_target(self) -> Optional[DeviceTarget]:
        """The DeviceTarget for this command, or None if unrecognized."""
        try:
            return DeviceTarget(self.target)
        except ValueError:
            return None


def endpoint_for(command: Command) -> Optional[str]:
    """
    Map a command to its direct control path.

    Returns:
        e.g. "/api/garage/open" or "/api/led/room2/off";
        None when the target is not recognized (caller falls back to
        CONTROL_ENDPOINT with the raw command as body).
    """
    target = command.known_target
    if target is None:
        return None
    return _ENDPOINT_TEMPLATES[target].format(action=quote(command.action, safe=""))


def target_label(command: Command) -> str:
    """Friendly name of the command target, or the raw target if unknown."""
    target = command.known_target
    return TARGET_LABELS[target] if target else command.target


def describe(command: Command) -> str:
    """Short human phrase for a command, e.g. "on Garage LED"."""
    return f"{command.action} {target_label(command)}"
