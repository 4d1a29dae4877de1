"""
Device Router - configure and talk to the home-automation board.

    POST /api/device          {action: setAddress|probe|sendCommand|getAddress, ...}
    GET  /api/device          current address and reachability
    GET  /api/device/status   refreshed status snapshot

The older action names (setIp, testConnection, getIp) are still accepted
so existing front-ends keep working.

Errors:
- Bad requests (missing address, missing command, unknown action) -> 400
- Device-side failures -> 200 with {"success": false, "message", "error"}
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from sirius.deps import get_device_session
from sirius.services.commands import Command
from sirius.services.device_gateway import DeviceResult
from sirius.services.device_session import DeviceSession

# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger("sirius.routers.device")


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/api/device", tags=["device"])

ACTION_ALIASES = {
    "setIp": "setAddress",
    "testConnection": "probe",
    "getIp": "getAddress",
}


# ---------------------------------------------------------------------------
# REQUEST/RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class DeviceRequest(BaseModel):
    """
    Request schema for POST /api/device.

    Examples:
    {"action": "setAddress", "address": "192.168.1.50"}
    {"action": "probe"}
    {"action": "sendCommand", "command": {"action": "open", "target": "garage"}}
    {"action": "sendCommand", "endpoint": "/api/buzzer/beep", "method": "GET"}
    """
    action: str = Field(description="setAddress, probe, sendCommand or getAddress")
    address: Optional[str] = Field(default=None, description="Device host[:port] for setAddress")
    ip: Optional[str] = Field(default=None, description="Legacy name for address")
    command: Optional[Command] = Field(default=None, description="Resolved command to dispatch")
    endpoint: Optional[str] = Field(default=None, description="Raw device path, e.g. /api/garage/open")
    method: str = Field(default="GET", description="HTTP method for a raw endpoint")
    data: Optional[Dict[str, Any]] = Field(default=None, description="JSON body for a raw endpoint")


class DeviceResponse(BaseModel):
    """Response schema for every device endpoint."""
    success: bool
    message: str
    address: Optional[str] = None
    reachable: bool = False
    data: Optional[Any] = None
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# HELPER FUNCTIONS
# ---------------------------------------------------------------------------

def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def _address_message(session: DeviceSession) -> str:
    address = session.get_address()
    return f"Current device address: {address}" if address else "No device address configured"


def _from_result(session: DeviceSession, result: DeviceResult) -> DeviceResponse:
    return DeviceResponse(
        success=result.success,
        message=result.message,
        address=session.get_address(),
        reachable=session.is_reachable,
        data=result.data,
        error=result.error.value if result.error else None,
    )


# ---------------------------------------------------------------------------
# ACTION HANDLERS
# ---------------------------------------------------------------------------

async def _set_address(request: DeviceRequest, session: DeviceSession) -> DeviceResponse:
    raw = request.address or request.ip
    if not raw or not raw.strip():
        raise _bad_request("Device address is required")

    try:
        address = session.set_address(raw)
    except ValueError as e:
        raise _bad_request(str(e))
    return DeviceResponse(
        success=True,
        message="Device address set successfully",
        address=address,
        reachable=session.is_reachable,
    )


async def _probe(request: DeviceRequest, session: DeviceSession) -> DeviceResponse:
    if not session.get_address():
        raise _bad_request("Device address not configured")

    result = await session.check_connection()
    return _from_result(session, result)


async def _send_command(request: DeviceRequest, session: DeviceSession) -> DeviceResponse:
    if request.command is not None:
        result = await session.send_command(request.command)
    elif request.endpoint:
        result = await session.send_raw(request.endpoint, method=request.method, body=request.data)
    else:
        raise _bad_request("A command or an endpoint is required")

    return _from_result(session, result)


async def _get_address(request: DeviceRequest, session: DeviceSession) -> DeviceResponse:
    return DeviceResponse(
        success=True,
        message=_address_message(session),
        address=session.get_address(),
        reachable=session.is_reachable,
    )


_HANDLERS = {
    "setAddress": _set_address,
    "probe": _probe,
    "sendCommand": _send_command,
    "getAddress": _get_address,
}


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("", response_model=DeviceResponse)
async def device_action(
    request: DeviceRequest,
    session: DeviceSession = Depends(get_device_session),
):
    """Dispatch one device-configuration action."""
    action = ACTION_ALIASES.get(request.action, request.action)
    handler = _HANDLERS.get(action)
    if handler is None:
        raise _bad_request(f"Invalid action: {request.action}")

    logger.info(f"Device action: {action}")
    return await handler(request, session)


@router.get("", response_model=DeviceResponse)
async def get_device(session: DeviceSession = Depends(get_device_session)):
    """Current address and reachability."""
    return DeviceResponse(
        success=True,
        message=_address_message(session),
        address=session.get_address(),
        reachable=session.is_reachable,
    )


@router.get("/status", response_model=DeviceResponse)
async def get_device_status(session: DeviceSession = Depends(get_device_session)):
    """
    Refresh and return the status snapshot.

    When the refresh fails the last known snapshot is returned with
    success=false, so the panel can still show something.
    """
    result = await session.refresh_status()
    if result.success:
        return _from_result(session, result)

    return DeviceResponse(
        success=False,
        message=result.message,
        address=session.get_address(),
        reachable=session.is_reachable,
        data=session.get_last_snapshot(),
        error=result.error.value if result.error else None,
    )
