"""
Device Session - the server's single, injectable handle on the board.

Holds the ConnectionState and routes everything through the DeviceGateway.
One session lives on app.state for the lifetime of the process; routes get
it through a FastAPI dependency so tests can supply their own.

Lifecycle:
    set_address("192.168.1.50")  -> reachable = False
    probe()                      -> reachable = True/False, snapshot updated
    send_command(...)            -> only reaches the network when reachable
"""

import logging
from typing import Any, Dict, Optional

from sirius.services.commands import STATUS_ENDPOINT, Command, describe
from sirius.services.connection_state import ConnectionState
from sirius.services.device_gateway import DeviceGateway, DeviceResult

logger = logging.getLogger("sirius.services.device_session")


class DeviceSession:
    """
    Address, reachability and command dispatch for one device.

    Usage:
        session = DeviceSession(DeviceGateway())
        session.set_address("192.168.1.50")
        if await session.probe():
            await session.send_command(Command(action="on", target="room1_led"))
    """

    def __init__(self, gateway: DeviceGateway, state: Optional[ConnectionState] = None):
        self.gateway = gateway
        self.state = state or ConnectionState()

    # -------------------------------------------------------------------------
    # ADDRESS
    # -------------------------------------------------------------------------

    def set_address(self, address: str) -> str:
        """Store a new address; the device must be probed again."""
        return self.state.set_address(address)

    def get_address(self) -> Optional[str]:
        return self.state.device_address

    def get_last_snapshot(self) -> Optional[Dict[str, Any]]:
        return self.state.last_snapshot

    @property
    def is_reachable(self) -> bool:
        return self.state.reachable

    # -------------------------------------------------------------------------
    # REACHABILITY
    # -------------------------------------------------------------------------

    async def probe(self) -> bool:
        """Run a reachability check and return the new reachability."""
        await self.check_connection()
        return self.state.reachable

    async def check_connection(self) -> DeviceResult:
        """
        Check the device with GET /api/status.

        Updates reachability and, on success, the snapshot.
        A result for an address that was replaced while the check was
        in flight is returned but not applied.
        The DeviceResult carries the message shown to the user.
        """
        address = self.state.device_address
        result = await self.gateway.fetch_status(address)
        if self.state.device_address != address:
            logger.info(f"Address changed during check of {address}, discarding result")
            return result

        if result.success:
            snapshot = result.data if isinstance(result.data, dict) else None
            self.state.mark_reachable(snapshot)
            logger.info(f"Device {self.state.device_address} reachable")
        else:
            self.state.mark_unreachable()
            logger.warning(f"Device {self.state.device_address} unreachable: {result.message}")
        return result

    async def refresh_status(self) -> DeviceResult:
        """
        Re-read the snapshot without touching reachability on failure.

        Used after commands and by GET /api/device/status; a failed refresh
        leaves the last known snapshot in place.
        """
        address = self.state.device_address
        result = await self.gateway.request(self.state, STATUS_ENDPOINT, method="GET",
                                            timeout=self.gateway.probe_timeout)
        if self.state.device_address != address:
            logger.info(f"Address changed during refresh of {address}, discarding snapshot")
            return result
        if result.success and isinstance(result.data, dict):
            self.state.last_snapshot = result.data
        return result

    # -------------------------------------------------------------------------
    # COMMANDS
    # -------------------------------------------------------------------------

    async def send_command(self, command: Command) -> DeviceResult:
        """
        Dispatch a resolved command, then refresh the snapshot.

        The refresh is best effort: its failure is logged and does not
        change the command's result.
        """
        logger.info(f"Dispatching: {describe(command)}")
        result = await self.gateway.send_command(self.state, command)

        if result.success:
            refresh = await self.refresh_status()
            if not refresh.success:
                logger.warning(f"Status refresh after command failed: {refresh.message}")

        return result

    async def send_raw(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
    ) -> DeviceResult:
        """Send an arbitrary request (used by the control panel)."""
        return await self.gateway.request(self.state, endpoint, method=method, body=body)
