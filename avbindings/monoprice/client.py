"""Async client for Monoprice/Xantech multi-zone amplifiers."""

import logging
from typing import List, Optional

from ..exceptions import MalformedResponse
from .commands import AmplifierCommands
from .connection import AmplifierConnection
from .models import ZoneStatus
from .parser import parse
from .profiles import DeviceProfile

_LOGGER = logging.getLogger(__name__)


class AmplifierClient:
    """Async client for one amplifier (or chain of amplifier units)."""

    def __init__(
        self,
        profile: DeviceProfile,
        host: str,
        port: int,
        timeout: float = 3.0,
        max_retries: int = 3,
        connection: Optional[AmplifierConnection] = None,
    ) -> None:
        """Initialize client.

        Args:
            profile: Model profile
            host: Serial-over-IP bridge address
            port: Bridge TCP port
            timeout: Exchange timeout in seconds
            max_retries: Maximum attempts per exchange
            connection: Pre-built connection (tests)
        """
        self.profile = profile
        self._commands = AmplifierCommands(profile)
        self._connection = connection or AmplifierConnection(
            host=host, port=port, timeout=timeout, max_retries=max_retries
        )

    @property
    def commands(self) -> AmplifierCommands:
        return self._commands

    async def connect(self) -> None:
        await self._connection.connect()

    async def disconnect(self) -> None:
        await self._connection.disconnect()

    # ========================================================================
    # LOW-LEVEL COMMAND EXECUTION
    # ========================================================================

    def _is_status_line(self, line: str) -> bool:
        try:
            return parse(line, self.profile) is not None
        except MalformedResponse:
            return False

    async def _query(self, command: str) -> List[ZoneStatus]:
        response = await self._connection.send(command, is_complete=self._is_status_line)
        return self.parse_response(response)

    def parse_response(self, response: str) -> List[ZoneStatus]:
        """Parse every status line of a raw reply; other lines are skipped."""
        statuses = []
        for line in response.replace("\r", "\n").split("\n"):
            try:
                status = parse(line, self.profile)
            except MalformedResponse as err:
                _LOGGER.debug("Skipping malformed line: %s", err)
                continue
            if status is not None:
                statuses.append(status)
        return statuses

    async def _send_command(self, command: str) -> None:
        await self._connection.send(command)

    # ========================================================================
    # QUERIES
    # ========================================================================

    async def query_zone(self, zone_id: str) -> List[ZoneStatus]:
        """Get the status of a zone.

        Runs the zone query plus the single-field queries the model needs.
        Every status line in the replies is returned, including lines for
        other zones the amplifier chose to report.

        Raises:
            CommandError: Invalid zone id
            TransportError: Exchange failed
        """
        self._commands.validate_zone(zone_id)

        statuses = await self._query(self._commands.query_zone(zone_id))
        for command in self._commands.extra_queries(zone_id):
            statuses.extend(await self._query(command))

        _LOGGER.debug("Zone %s status lines: %s", zone_id, statuses)
        return statuses

    # ========================================================================
    # ZONE COMMANDS
    # ========================================================================

    async def set_power(self, zone_id: str, power: bool) -> None:
        await self._send_command(self._commands.set_power(zone_id, power))
        _LOGGER.debug("Zone %s power %s", zone_id, "on" if power else "off")

    async def set_mute(self, zone_id: str, mute: bool) -> None:
        await self._send_command(self._commands.set_mute(zone_id, mute))
        _LOGGER.debug("Zone %s %s", zone_id, "muted" if mute else "unmuted")

    async def set_dnd(self, zone_id: str, dnd: bool) -> None:
        await self._send_command(self._commands.set_dnd(zone_id, dnd))

    async def set_source(self, zone_id: str, source: int) -> None:
        await self._send_command(self._commands.set_source(zone_id, source))
        _LOGGER.debug("Zone %s source %d", zone_id, source)

    async def set_volume(self, zone_id: str, volume: int) -> None:
        """Set the raw volume (0 to max volume)."""
        await self._send_command(self._commands.set_volume(zone_id, volume))
        _LOGGER.debug("Zone %s volume %d", zone_id, volume)

    async def set_treble(self, zone_id: str, treble: int) -> None:
        await self._send_command(self._commands.set_treble(zone_id, treble))

    async def set_bass(self, zone_id: str, bass: int) -> None:
        await self._send_command(self._commands.set_bass(zone_id, bass))

    async def set_balance(self, zone_id: str, balance: int) -> None:
        await self._send_command(self._commands.set_balance(zone_id, balance))
