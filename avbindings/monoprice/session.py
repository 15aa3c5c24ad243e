"""Polling session for one Monoprice/Xantech amplifier.

The session keeps the last reported status of every configured zone. Each
refresh tick queries the zones in turn, merges what the amplifier reported
into that cache and emits a channel update only for fields that changed.
A zone's queries and the merge of their replies run under the session lock,
and so do user commands. A command can therefore never land between a
zone's status query and the cache update that follows it.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..exceptions import CommandError, TransportError
from ..models import StateListener, ThingStatus, ThingStatusDetail
from ..scheduler import RefreshJob
from .client import AmplifierClient
from .const import (
    ALL_COMMANDS,
    ALL_GROUP,
    BALANCE,
    BASS,
    DND,
    MUTE,
    POWER,
    SOURCE,
    SWITCH_FIELDS,
    TREBLE,
    VOLUME,
    zone_channel,
)
from .models import ZoneStatus

if TYPE_CHECKING:
    from ..config import AmplifierConfig

_LOGGER = logging.getLogger(__name__)


class AmplifierSession:
    """State cache and command handling for one amplifier."""

    def __init__(
        self,
        config: "AmplifierConfig",
        client: AmplifierClient,
        listener: StateListener,
    ) -> None:
        self.config = config
        self.profile = config.profile
        self._client = client
        self._listener = listener
        self._zone_data: Dict[str, ZoneStatus] = {}
        self._status = ThingStatus.UNKNOWN
        self._lock = asyncio.Lock()
        self._refresh_job: Optional[RefreshJob] = None

    @classmethod
    def from_config(
        cls,
        config: "AmplifierConfig",
        listener: StateListener,
        timeout: float = 3.0,
        max_retries: int = 3,
    ) -> "AmplifierSession":
        """Build a session with its own client for the configured bridge."""
        client = AmplifierClient(
            profile=config.profile,
            host=config.host,
            port=config.port,
            timeout=timeout,
            max_retries=max_retries,
        )
        return cls(config, client, listener)

    @property
    def status(self) -> ThingStatus:
        return self._status

    @property
    def zone_names(self) -> List[str]:
        """Logical names of the configured zones."""
        return [self.profile.zone_index_to_name(zone_id) for zone_id in self.config.zone_ids]

    def zone_status(self, zone_name: str) -> Optional[ZoneStatus]:
        """Cached status of a zone, if it has been reported."""
        zone_id = self.profile.name_to_zone_index(zone_name)
        return self._zone_data.get(zone_id) if zone_id else None

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    async def async_initialize(self) -> None:
        self._status = ThingStatus.UNKNOWN
        self._listener.update_status(ThingStatus.UNKNOWN)

    def start(self) -> None:
        """Start periodic polling."""
        if self._refresh_job is None:
            self._refresh_job = RefreshJob(
                f"{self.profile.name}@{self.config.host}",
                self.async_refresh,
                self.config.refresh,
            )
        self._refresh_job.start()

    async def stop(self) -> None:
        """Stop polling and close the connection."""
        if self._refresh_job is not None:
            await self._refresh_job.cancel()
            self._refresh_job = None
        async with self._lock:
            await self._client.disconnect()

    # ========================================================================
    # POLLING
    # ========================================================================

    async def async_refresh(self) -> None:
        """Query every configured zone and emit the fields that changed."""
        for zone_id in self.config.zone_ids:
            async with self._lock:
                try:
                    statuses = await self._client.query_zone(zone_id)
                except TransportError as err:
                    self._set_offline(err)
                    return

                if statuses:
                    self._set_online()
                for status in statuses:
                    self._process_zone_status(status)

    def _process_zone_status(self, status: ZoneStatus) -> None:
        zone_id = status.zone
        zone_name = self.profile.zone_index_to_name(zone_id) if zone_id else None
        if zone_name is None or zone_id not in self.config.zone_ids:
            _LOGGER.debug("Ignoring status for unconfigured zone %s", zone_id)
            return

        cached = self._zone_data.setdefault(zone_id, ZoneStatus(zone=zone_id))
        for field_name, value in status.populated().items():
            if field_name == "zone" or getattr(cached, field_name) == value:
                continue
            setattr(cached, field_name, value)
            self._listener.update_state(
                zone_channel(zone_name, field_name), self._channel_value(field_name, value)
            )

    def _channel_value(self, field_name: str, value: Any) -> Any:
        """Convert a raw status field to its channel value."""
        p = self.profile
        if field_name in SWITCH_FIELDS:
            return int(value) == 1
        if field_name == SOURCE:
            return int(value)
        if field_name == VOLUME:
            return round(value * 100 / p.max_vol)
        if field_name in (TREBLE, BASS):
            return value - p.tone_offset
        if field_name == BALANCE:
            return value - p.bal_offset
        return value

    def _set_online(self) -> None:
        if self._status != ThingStatus.ONLINE:
            self._status = ThingStatus.ONLINE
            self._listener.update_status(ThingStatus.ONLINE)

    def _set_offline(self, err: Exception) -> None:
        _LOGGER.warning("Amplifier %s unreachable: %s", self.config.host, err)
        if self._status != ThingStatus.OFFLINE:
            self._status = ThingStatus.OFFLINE
            self._listener.update_status(
                ThingStatus.OFFLINE,
                ThingStatusDetail.COMMUNICATION_ERROR,
                "Error communicating with the amplifier",
            )

    # ========================================================================
    # COMMANDS
    # ========================================================================

    async def async_handle_command(self, channel: str, value: Any) -> None:
        """Apply a channel command.

        Args:
            channel: "zoneN#<field>" or "all#<allfield>"
            value: bool for switches, percent for volume, input number for
                source, logical value for tone and balance

        Raises:
            CommandError: Unknown channel or invalid value
        """
        group, _, name = channel.partition("#")
        async with self._lock:
            await self._dispatch_command(group, name, value)

    async def _dispatch_command(self, group: str, name: str, value: Any) -> None:
        try:
            if group == ALL_GROUP:
                await self._handle_all_command(name, value)
                return

            zone_id = self.profile.name_to_zone_index(group)
            if zone_id is None or zone_id not in self.config.zone_ids:
                raise CommandError(f"Zone {group!r} is not configured")
            await self._handle_zone_command(zone_id, name, value)

        except TransportError as err:
            self._set_offline(err)

    async def _handle_all_command(self, name: str, value: Any) -> None:
        field_name = ALL_COMMANDS.get(name)
        if field_name is None:
            raise CommandError(f"Unknown channel all#{name}")

        for zone_id in self.config.zone_ids:
            if self.profile.zone_index_to_name(zone_id) in self.config.ignore_zones:
                continue
            await self._handle_zone_command(zone_id, field_name, value)

    async def _handle_zone_command(self, zone_id: str, field_name: str, value: Any) -> None:
        p = self.profile
        client = self._client

        if field_name == POWER:
            await client.set_power(zone_id, bool(value))
            raw = p.on_str if value else p.off_str
        elif field_name == MUTE:
            await client.set_mute(zone_id, bool(value))
            raw = p.on_str if value else p.off_str
        elif field_name == DND:
            await client.set_dnd(zone_id, bool(value))
            raw = p.on_str if value else p.off_str
        elif field_name == SOURCE:
            await client.set_source(zone_id, int(value))
            raw = p.format_number(int(value))
        elif field_name == VOLUME:
            percent = int(value)
            if not 0 <= percent <= 100:
                raise CommandError(f"Volume must be 0-100%, got {percent}")
            raw = round(percent * p.max_vol / 100)
            await client.set_volume(zone_id, raw)
        elif field_name in (TREBLE, BASS):
            if field_name == TREBLE:
                await client.set_treble(zone_id, int(value))
            else:
                await client.set_bass(zone_id, int(value))
            raw = int(value) + p.tone_offset
        elif field_name == BALANCE:
            await client.set_balance(zone_id, int(value))
            raw = int(value) + p.bal_offset
        else:
            raise CommandError(f"Unsupported zone channel {field_name!r}")

        # the amplifier does not answer set commands with a status line
        self._process_zone_status(ZoneStatus(zone=zone_id, **{field_name: raw}))
