"""
Device Gateway - sends HTTP requests to the home-automation board.

The board exposes a tiny REST API on the local network:

    GET  http://<address>/api/status
    GET  http://<address>/api/<target>/<action>
    POST http://<address>/api/control   {"action": ..., "target": ...}

Every call:
- is bounded by an explicit timeout (cancelled when it expires)
- is attempted exactly once, no retries or queueing
- comes back as a DeviceResult, never as an exception

Failure mapping:
    address unset / last probe failed  -> DEVICE_UNREACHABLE (no network call)
    connection refused / DNS failure   -> DEVICE_UNREACHABLE
    no response in time                -> DEVICE_TIMEOUT
    non-2xx reply                      -> DEVICE_REJECTED
"""

import asyncio
import logging
import socket
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from sirius.core.config import settings
from sirius.core.errors import ErrorKind
from sirius.services.commands import CONTROL_ENDPOINT, STATUS_ENDPOINT, Command, endpoint_for
from sirius.services.connection_state import ConnectionState

logger = logging.getLogger("sirius.services.device_gateway")

NOT_CONFIGURED_MESSAGE = "Device address is not configured."
NOT_CONNECTED_MESSAGE = "Device is not connected. Test the connection first."
COMMAND_TIMEOUT_MESSAGE = "Command timeout. Device may be busy or offline."
PROBE_TIMEOUT_MESSAGE = "Connection timeout. Device may be offline."
REFUSED_MESSAGE = "Device connection refused. Check if device is online."
NOT_FOUND_MESSAGE = "Device not found. Check the address."
UNREACHABLE_MESSAGE = "Could not reach the device. Check the address and network."
INVALID_ADDRESS_MESSAGE = "Invalid device address. Use host or host:port, e.g. 192.168.1.50."
COMMAND_OK_MESSAGE = "Command executed successfully"
PROBE_OK_MESSAGE = "Connected to device successfully"


@dataclass
class DeviceResult:
    """
    Outcome of one device call.

    Attributes:
        success: True when the device answered 2xx
        message: Human-readable description (device's own message when it sent one)
        data: Parsed JSON body, if any
        error: Failure cause when success is False
        status_code: HTTP status, when a response was received
    """
    success: bool
    message: str
    data: Optional[Any] = None
    error: Optional[ErrorKind] = None
    status_code: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "success": self.success,
            "message": self.message,
            "data": self.data,
        }
        if self.error:
            result["error"] = self.error.value
        return result


def _connect_error_message(error: Exception) -> str:
    """Pick a message from the OS-level cause of a connection failure."""
    cause: Optional[BaseException] = error
    while cause is not None:
        if isinstance(cause, ConnectionRefusedError):
            return REFUSED_MESSAGE
        if isinstance(cause, socket.gaierror):
            return NOT_FOUND_MESSAGE
        cause = cause.__cause__ or cause.__context__

    text = str(error).lower()
    if "refused" in text:
        return REFUSED_MESSAGE
    if "name or service not known" in text or "nodename nor servname" in text or "getaddrinfo" in text:
        return NOT_FOUND_MESSAGE
    return UNREACHABLE_MESSAGE


class DeviceGateway:
    """
    Stateless HTTP client for the board.

    Reachability gating reads a ConnectionState but never writes it;
    DeviceSession owns the state transitions.

    Usage:
        gateway = DeviceGateway()
        result = await gateway.send_command(state, Command(action="open", target="garage"))
        if not result.success:
            print(result.error, result.message)
    """

    def __init__(
        self,
        command_timeout: float = None,
        probe_timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.command_timeout = command_timeout or settings.DEVICE_COMMAND_TIMEOUT
        self.probe_timeout = probe_timeout or settings.DEVICE_PROBE_TIMEOUT
        # Injected in tests (httpx.MockTransport)
        self._transport = transport

    # -------------------------------------------------------------------------
    # GATED CALLS
    # -------------------------------------------------------------------------

    async def request(
        self,
        state: ConnectionState,
        endpoint: str,
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> DeviceResult:
        """
        Send a request to the board if it is known to be reachable.

        Args:
            state: Current connection state
            endpoint: Path on the device, e.g. "/api/garage/open"
            method: HTTP method
            body: JSON body, sent only for non-GET methods
            timeout: Overrides the command timeout

        Returns:
            DeviceResult; DEVICE_UNREACHABLE without any network call
            when the address is unset or the last probe failed
        """
        if not state.device_address:
            return DeviceResult(success=False, message=NOT_CONFIGURED_MESSAGE, error=ErrorKind.DEVICE_UNREACHABLE)
        if not state.reachable:
            return DeviceResult(success=False, message=NOT_CONNECTED_MESSAGE, error=ErrorKind.DEVICE_UNREACHABLE)

        return await self._perform(
            state.device_address,
            endpoint,
            method=method,
            body=body,
            timeout=timeout or self.command_timeout,
        )

    async def send_command(self, state: ConnectionState, command: Command) -> DeviceResult:
        """
        Dispatch a resolved command.

        Known targets use their direct path (GET); anything else goes to
        the generic control endpoint with the command as body.
        """
        endpoint = endpoint_for(command)
        if endpoint is not None:
            return await self.request(state, endpoint, method="GET")

        logger.info(f"Unknown target '{command.target}', using {CONTROL_ENDPOINT}")
        return await self.request(
            state,
            CONTROL_ENDPOINT,
            method="POST",
            body={"action": command.action, "target": command.target},
        )

    # -------------------------------------------------------------------------
    # UNGATED CALLS
    # -------------------------------------------------------------------------

    async def fetch_status(self, address: str) -> DeviceResult:
        """
        GET /api/status regardless of reachability.

        This is how reachability is established in the first place.
        """
        if not address:
            return DeviceResult(success=False, message=NOT_CONFIGURED_MESSAGE, error=ErrorKind.DEVICE_UNREACHABLE)

        result = await self._perform(
            address,
            STATUS_ENDPOINT,
            method="GET",
            timeout=self.probe_timeout,
            timeout_message=PROBE_TIMEOUT_MESSAGE,
            ok_message=PROBE_OK_MESSAGE,
        )
        if result.error == ErrorKind.DEVICE_REJECTED and result.status_code is not None:
            result.message = f"Failed to connect to device (status: {result.status_code})"
        return result

    # -------------------------------------------------------------------------
    # TRANSPORT
    # -------------------------------------------------------------------------

    async def _perform(
        self,
        address: str,
        endpoint: str,
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
        timeout: float = None,
        timeout_message: str = COMMAND_TIMEOUT_MESSAGE,
        ok_message: str = COMMAND_OK_MESSAGE,
    ) -> DeviceResult:
        method = method.upper()
        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"
        url = f"http://{address}{endpoint}"
        timeout = timeout or self.command_timeout

        request_kwargs: Dict[str, Any] = {"headers": {"Content-Type": "application/json"}}
        if body is not None and method != "GET":
            request_kwargs["json"] = body

        logger.info(f"{method} {url}" + (f" body={body}" if "json" in request_kwargs else ""))

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=timeout) as client:
                response = await asyncio.wait_for(
                    client.request(method, url, **request_kwargs),
                    timeout=timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning(f"{method} {url} timed out after {timeout}s")
            return DeviceResult(success=False, message=timeout_message, error=ErrorKind.DEVICE_TIMEOUT)
        except httpx.ConnectError as e:
            logger.warning(f"{method} {url} connection failed: {e}")
            return DeviceResult(
                success=False,
                message=_connect_error_message(e),
                error=ErrorKind.DEVICE_UNREACHABLE,
            )
        except httpx.RequestError as e:
            logger.error(f"{method} {url} transport error: {e}")
            return DeviceResult(
                success=False,
                message=f"Error communicating with the device: {e}",
                error=ErrorKind.DEVICE_UNREACHABLE,
            )
        except httpx.InvalidURL as e:
            logger.warning(f"{method} {url} invalid address: {e}")
            return DeviceResult(success=False, message=INVALID_ADDRESS_MESSAGE, error=ErrorKind.DEVICE_UNREACHABLE)

        data = self._parse_body(response)
        device_message = self._device_message(data)
        logger.info(f"Device responded {response.status_code}")

        if response.is_success:
            return DeviceResult(
                success=True,
                message=device_message or ok_message,
                data=data,
                status_code=response.status_code,
            )

        return DeviceResult(
            success=False,
            message=device_message or f"Device returned error (status: {response.status_code})",
            data=data,
            error=ErrorKind.DEVICE_REJECTED,
            status_code=response.status_code,
        )

    @staticmethod
    def _device_message(data: Any) -> Optional[str]:
        """The board's own "message" field as text, if it sent one."""
        if not isinstance(data, dict):
            return None
        message = data.get("message")
        if message is None:
            return None
        return message if isinstance(message, str) else str(message)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        """JSON body, or an empty dict when there is none or it is not JSON."""
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}
