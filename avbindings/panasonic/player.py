"""Polling session for a Panasonic Blu-ray player.

One refresh tick runs up to three status calls, all under the session lock:

    REVIEW      -> player status code ("07" = powered off) and power channel
    PST         -> play mode and elapsed time code
    GET_STATUS  -> total time and chapters (BD players only, on time change)

Cached play mode and time code make repeated ticks quiet: channels are only
updated when the player reports something new. Button commands take the same
lock, so an authenticated command's nonce fetch and POST can never be split
by a poll.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Mapping, Optional

from ..exceptions import AuthComputationError, CommandError, ConfigurationError, TransportError
from ..models import UNDEF, StateListener, ThingStatus, ThingStatusDetail
from ..scheduler import RefreshJob
from .auth import check_algorithm, compute_digest
from .connection import PlayerConnection
from .const import (
    AUTH_FORM,
    BUTTON,
    CHAPTER_CURRENT,
    CHAPTER_TOTAL,
    COMMA,
    CONTROL,
    CONTROL_CMDS,
    CRLF,
    EXTENDED_STATUS_MODELS,
    GET_NONCE_CMD,
    MODE_STOP,
    OFF_STATUS,
    PLAY_MODE,
    PLAY_MODE_MAP,
    PLAYBACK_CHANNELS,
    PLAYER_STATUS,
    POWER,
    POWER_DEBOUNCE_TICKS,
    POWER_OFF_CMD,
    POWER_ON_CMD,
    PST_POST_CMD,
    REFRESH,
    REVIEW_POST_CMD,
    STATUS_MAP,
    STATUS_POST_CMD,
    TIME_ELAPSED,
    TIME_TOTAL,
    UNKNOWN,
    command_fields,
)

if TYPE_CHECKING:
    from ..config import PlayerConfig

_LOGGER = logging.getLogger(__name__)


@dataclass
class PlayerState:
    """Last observed player state; only touched while holding the session lock."""

    play_mode: str = ""
    time_code: str = "0"
    status_code: str = ""
    power: Optional[bool] = None
    power_debounce: int = 0
    thing_status: ThingStatus = ThingStatus.UNKNOWN
    status_detail: ThingStatusDetail = ThingStatusDetail.NONE


class PanasonicPlayer:
    """Session for one configured Blu-ray player."""

    def __init__(
        self,
        config: "PlayerConfig",
        listener: StateListener,
        connection: Optional[PlayerConnection] = None,
    ) -> None:
        self.config = config
        self.state = PlayerState()
        self._listener = listener
        self._connection = connection or PlayerConnection()
        self._lock = asyncio.Lock()
        self._refresh_job: Optional[RefreshJob] = None

    @property
    def supports_extended_status(self) -> bool:
        return self.config.model in EXTENDED_STATUS_MODELS

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    async def async_initialize(self) -> None:
        """Prepare the session before the first tick.

        Raises:
            ConfigurationError: Auth is configured but cannot be computed
        """
        _LOGGER.debug("Initializing Panasonic Blu-ray player %s", self.config.host)

        if self.config.auth_enabled:
            try:
                check_algorithm()
            except AuthComputationError as err:
                _LOGGER.error("Player key configured but digest unavailable: %s", err)
                self._update_status(
                    ThingStatus.OFFLINE, ThingStatusDetail.CONFIGURATION_ERROR, str(err)
                )
                raise ConfigurationError(str(err)) from err

        self.state = PlayerState()
        self._listener.update_status(ThingStatus.UNKNOWN)

    def start(self) -> None:
        """Start the periodic status refresh."""
        if self._refresh_job is None:
            self._refresh_job = RefreshJob(
                f"panasonic@{self.config.host}", self.async_refresh, self.config.refresh
            )
        self._refresh_job.start()

    async def stop(self) -> None:
        """Cancel the refresh job and release the transport."""
        _LOGGER.debug("Disposing Panasonic Blu-ray player %s", self.config.host)
        if self._refresh_job is not None:
            await self._refresh_job.cancel()
            self._refresh_job = None
        # a command exchange in flight completes before the transport goes away
        async with self._lock:
            await self._connection.close()

    # ========================================================================
    # POLLING
    # ========================================================================

    async def async_refresh(self) -> None:
        """Run one status tick."""
        async with self._lock:
            await self._refresh_player_status()

    async def _refresh_player_status(self) -> None:
        state = self.state

        # REVIEW second line: ?,status code,...
        review = self._second_line_fields(await self._send(fields=REVIEW_POST_CMD))
        if len(review) < 2:
            _LOGGER.debug("No player status this tick")
            return

        self._update_status(ThingStatus.ONLINE)
        status_code = review[1].strip()
        self._update_player_status(status_code)

        powered = status_code != OFF_STATUS
        self._update_power(powered)

        if not powered:
            # clear the playback channels once, then stay quiet while off
            if state.play_mode:
                state.play_mode = ""
                state.time_code = "0"
                self._listener.update_state(PLAY_MODE, UNDEF)
                self._clear_playback_channels()
            return

        # PST second line: 1,1543,0,00000000 (play mode, current time, ?, ?)
        status_arr = self._second_line_fields(await self._send(fields=PST_POST_CMD))
        if len(status_arr) < 2:
            _LOGGER.debug("No play status this tick")
            return

        play_mode = status_arr[0].strip()
        time_code = status_arr[1].strip()

        if play_mode != state.play_mode:
            state.play_mode = play_mode
            mode_name = PLAY_MODE_MAP.get(play_mode)

            if mode_name is None:
                _LOGGER.debug("Unknown play mode: %s", play_mode)
                self._listener.update_state(PLAY_MODE, UNKNOWN)
                self._clear_playback_channels()
                return

            self._listener.update_state(PLAY_MODE, mode_name)
            if play_mode == MODE_STOP:
                self._clear_playback_channels()
                # the player keeps reporting the last time code when stopped
                state.time_code = time_code

        # time code only moves while playing
        if time_code != state.time_code:
            try:
                elapsed = int(time_code)
            except ValueError:
                _LOGGER.debug("Malformed time code: %r", time_code)
                return

            state.time_code = time_code
            self._listener.update_state(TIME_ELAPSED, elapsed)

            if self.supports_extended_status:
                await self._refresh_playback_status()

    async def _refresh_playback_status(self) -> None:
        # GET_STATUS second line: 1,0,0,1,5999,61440,500,1,16,00000000
        # (?, ?, ?, cur time, total time, title#?, ?, chapter #, total chapters, ?)
        status_arr = self._second_line_fields(await self._send(fields=STATUS_POST_CMD))
        if len(status_arr) < 10:
            _LOGGER.debug("No extended playback status this tick")
            return

        try:
            total_time = int(status_arr[4])
            chapter = int(status_arr[7])
            chapters = int(status_arr[8])
        except ValueError:
            _LOGGER.debug("Malformed playback status: %s", status_arr)
            return

        self._listener.update_state(TIME_TOTAL, total_time)
        self._listener.update_state(CHAPTER_CURRENT, chapter)
        self._listener.update_state(CHAPTER_TOTAL, chapters)

    @staticmethod
    def _second_line_fields(response: Optional[str]) -> List[str]:
        if not response:
            return []
        lines = response.split(CRLF)
        if len(lines) < 2:
            return []
        return lines[1].split(COMMA)

    def _clear_playback_channels(self) -> None:
        for channel in PLAYBACK_CHANNELS:
            self._listener.update_state(channel, UNDEF)

    def _update_player_status(self, status_code: str) -> None:
        if status_code != self.state.status_code:
            self.state.status_code = status_code
            self._listener.update_state(PLAYER_STATUS, STATUS_MAP.get(status_code, UNKNOWN))

    def _update_power(self, powered: bool) -> None:
        state = self.state
        if state.power_debounce > 0:
            state.power_debounce -= 1
            if powered != state.power:
                # still booting or shutting down, keep the commanded state
                _LOGGER.debug("Ignoring power reading %s after power command", powered)
                return
            state.power_debounce = 0

        if powered != state.power:
            state.power = powered
            self._listener.update_state(POWER, powered)

    def _update_status(
        self,
        status: ThingStatus,
        detail: ThingStatusDetail = ThingStatusDetail.NONE,
        message: Optional[str] = None,
    ) -> None:
        if status == self.state.thing_status and detail == self.state.status_detail:
            return
        self.state.thing_status = status
        self.state.status_detail = detail
        self._listener.update_status(status, detail, message)

    # ========================================================================
    # COMMANDS
    # ========================================================================

    async def async_handle_command(self, channel: str, value: Any) -> None:
        """Send a channel command to the player.

        Args:
            channel: button (raw player command), control (PLAY, PAUSE, ...)
                or power (bool)
            value: Command value

        Raises:
            CommandError: Empty or unknown command value
        """
        if isinstance(value, str) and value.upper() == REFRESH:
            _LOGGER.debug("Unsupported refresh command on %s", channel)
            return

        if channel == BUTTON:
            command = str(value).strip().upper()
            if not command:
                raise CommandError("Button command must not be empty")
        elif channel == CONTROL:
            command = CONTROL_CMDS.get(str(value).upper())
            if command is None:
                raise CommandError(f"Unsupported control command: {value}")
        elif channel == POWER:
            command = POWER_ON_CMD if value else POWER_OFF_CMD
        else:
            _LOGGER.debug("Unsupported command on channel %s: %s", channel, value)
            return

        async with self._lock:
            response = await self._send(command=command, auth=self.config.auth_enabled)
            if response is not None and channel == POWER:
                self.state.power = bool(value)
                self.state.power_debounce = POWER_DEBOUNCE_TICKS
                self._listener.update_state(POWER, bool(value))

    async def _send(
        self,
        command: Optional[str] = None,
        fields: Optional[Mapping[str, str]] = None,
        auth: bool = False,
    ) -> Optional[str]:
        """Send a command or a pre-built form body; caller holds the lock.

        Returns:
            Response text, or None when the exchange failed (status set OFFLINE)
        """
        auth_key = ""
        if auth:
            nonce = await self._post(self.config.nonce_url, GET_NONCE_CMD)
            if nonce is None:
                return None
            try:
                auth_key = compute_digest(self.config.player_key, nonce.strip())
            except AuthComputationError as err:
                _LOGGER.error("Error creating auth key: %s", err)
                return None

        if fields is None:
            fields = command_fields(command)
            if auth:
                fields["cAUTH_FORM"] = AUTH_FORM
                fields["cAUTH_VALUE"] = auth_key

        _LOGGER.debug("Blu-ray command: %s", command or next(iter(fields)))
        return await self._post(self.config.url, fields)

    async def _post(self, url: str, fields: Mapping[str, str]) -> Optional[str]:
        try:
            response = await self._connection.post(url, fields)
        except TransportError as err:
            _LOGGER.debug("Error executing player command: %s", err)
            self._update_status(
                ThingStatus.OFFLINE,
                ThingStatusDetail.COMMUNICATION_ERROR,
                "Error communicating with the player",
            )
            return None
        return response
