"""Media player platform for Panasonic Blu-ray players."""
from __future__ import annotations

from datetime import timedelta
import logging
import time
from typing import Any

import voluptuous as vol

from homeassistant.components.media_player import (
    PLATFORM_SCHEMA,
    MediaPlayerEntity,
    MediaPlayerEntityFeature,
    MediaPlayerState,
)
from homeassistant.const import CONF_HOST, CONF_NAME, EVENT_HOMEASSISTANT_STOP
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers import config_validation as cv, entity_platform
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import (
    CoordinatorEntity,
    DataUpdateCoordinator,
    UpdateFailed,
)
from homeassistant.util import dt as dt_util

from avbindings import BindingError, ChannelCache, ConfigurationError, ThingStatus
from avbindings.config import validate_player_config
from avbindings.panasonic import PanasonicPlayer, PlayerConnection
from avbindings.panasonic import const as bdp

from .const import (
    ATTR_BUTTON,
    ATTR_CHAPTER_CURRENT,
    ATTR_CHAPTER_TOTAL,
    ATTR_PLAYER_STATUS,
    CONF_MODEL,
    CONF_PLAYER_KEY,
    CONF_REFRESH,
    DEFAULT_NAME,
    DOMAIN,
    SERVICE_SEND_BUTTON,
)

_LOGGER = logging.getLogger(__name__)

PLATFORM_SCHEMA = PLATFORM_SCHEMA.extend(
    {
        vol.Required(CONF_HOST): cv.string,
        vol.Optional(CONF_NAME, default=DEFAULT_NAME): cv.string,
        vol.Optional(CONF_PLAYER_KEY, default=""): cv.string,
        vol.Optional(CONF_REFRESH, default=bdp.DEFAULT_REFRESH): cv.positive_int,
        vol.Optional(CONF_MODEL, default=bdp.MODEL_BD_PLAYER): vol.In(bdp.PLAYER_MODELS),
    }
)

PLAY_MODE_TO_STATE = {
    bdp.PLAY: MediaPlayerState.PLAYING,
    bdp.PAUSE: MediaPlayerState.PAUSED,
    bdp.STOP: MediaPlayerState.IDLE,
}


async def async_setup_platform(
    hass: HomeAssistant,
    config: dict[str, Any],
    async_add_entities: AddEntitiesCallback,
    discovery_info: dict[str, Any] | None = None,
) -> None:
    """Set up a Panasonic Blu-ray player from YAML."""
    try:
        player_config = validate_player_config(config)
    except ConfigurationError as err:
        _LOGGER.error("Invalid Panasonic Blu-ray configuration: %s", err)
        return

    listener = ChannelCache()
    player = PanasonicPlayer(
        player_config,
        listener,
        PlayerConnection(session=async_get_clientsession(hass)),
    )
    try:
        await player.async_initialize()
    except ConfigurationError as err:
        _LOGGER.error("Cannot set up player %s: %s", player_config.host, err)
        return

    async def async_update_data() -> dict[str, Any]:
        """Run one status tick and hand the channel values to the entity."""
        refresh_start = time.monotonic()
        await player.async_refresh()
        refresh_ms = int((time.monotonic() - refresh_start) * 1000)

        if listener.status == ThingStatus.OFFLINE:
            _LOGGER.debug(
                "panasonic: coordinator stage=refresh duration_ms=%d ok=false err=%s",
                refresh_ms, listener.message,
            )
            raise UpdateFailed(listener.message or "Player offline")

        _LOGGER.debug(
            "panasonic: coordinator stage=refresh duration_ms=%d ok=true", refresh_ms
        )
        return listener.snapshot()

    coordinator = DataUpdateCoordinator(
        hass,
        _LOGGER,
        name=f"Panasonic Blu-ray ({player_config.host})",
        update_method=async_update_data,
        update_interval=timedelta(seconds=player_config.refresh),
    )
    await coordinator.async_refresh()

    async def async_stop(_event) -> None:
        await player.stop()

    hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, async_stop)

    async_add_entities(
        [PanasonicBlurayPlayer(coordinator, player, listener, config[CONF_NAME])]
    )

    platform = entity_platform.async_get_current_platform()
    platform.async_register_entity_service(
        SERVICE_SEND_BUTTON,
        {vol.Required(ATTR_BUTTON): cv.string},
        "async_send_button",
    )


class PanasonicBlurayPlayer(CoordinatorEntity, MediaPlayerEntity):
    """Representation of a Panasonic Blu-ray player."""

    _attr_should_poll = False  # Coordinator handles polling
    _attr_icon = "mdi:disc-player"
    _attr_supported_features = (
        MediaPlayerEntityFeature.TURN_ON
        | MediaPlayerEntityFeature.TURN_OFF
        | MediaPlayerEntityFeature.PLAY
        | MediaPlayerEntityFeature.PAUSE
        | MediaPlayerEntityFeature.STOP
        | MediaPlayerEntityFeature.NEXT_TRACK
        | MediaPlayerEntityFeature.PREVIOUS_TRACK
    )

    def __init__(
        self,
        coordinator: DataUpdateCoordinator,
        player: PanasonicPlayer,
        listener: ChannelCache,
        name: str,
    ) -> None:
        """Initialize the player entity."""
        super().__init__(coordinator)

        self._player = player
        self._listener = listener
        self._attr_name = name
        self._attr_unique_id = f"{DOMAIN}_{player.config.host}"
        self._position_updated_at = None
        self._last_position = None

    def _channel(self, channel: str) -> Any:
        if not self.coordinator.data:
            return None
        value = self.coordinator.data.get(channel)
        # UNDEF channels read as missing
        return value if isinstance(value, (bool, int, str)) else None

    @callback
    def _handle_coordinator_update(self) -> None:
        position = self._channel(bdp.TIME_ELAPSED)
        if position != self._last_position:
            self._last_position = position
            self._position_updated_at = dt_util.utcnow()
        super()._handle_coordinator_update()

    @property
    def available(self) -> bool:
        """Return if entity is available."""
        return self.coordinator.last_update_success

    @property
    def state(self) -> MediaPlayerState | None:
        """Return the state of the player."""
        power = self._channel(bdp.POWER)
        if power is None:
            return None  # Unknown until the player reports
        if not power:
            return MediaPlayerState.OFF

        return PLAY_MODE_TO_STATE.get(self._channel(bdp.PLAY_MODE), MediaPlayerState.ON)

    @property
    def media_position(self) -> int | None:
        return self._channel(bdp.TIME_ELAPSED)

    @property
    def media_position_updated_at(self):
        return self._position_updated_at

    @property
    def media_duration(self) -> int | None:
        return self._channel(bdp.TIME_TOTAL)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return additional state attributes."""
        return {
            ATTR_PLAYER_STATUS: self._channel(bdp.PLAYER_STATUS),
            ATTR_CHAPTER_CURRENT: self._channel(bdp.CHAPTER_CURRENT),
            ATTR_CHAPTER_TOTAL: self._channel(bdp.CHAPTER_TOTAL),
        }

    async def _async_command(self, channel: str, value: Any) -> None:
        try:
            await self._player.async_handle_command(channel, value)
        except BindingError as err:
            _LOGGER.error("Failed to send %s=%s to player: %s", channel, value, err)
            return

        # Update local state immediately for responsiveness
        self.coordinator.async_set_updated_data(self._listener.snapshot())

    async def async_turn_on(self) -> None:
        """Turn the player on."""
        await self._async_command(bdp.POWER, True)

    async def async_turn_off(self) -> None:
        """Turn the player off."""
        await self._async_command(bdp.POWER, False)

    async def async_media_play(self) -> None:
        await self._async_command(bdp.CONTROL, "PLAY")

    async def async_media_pause(self) -> None:
        await self._async_command(bdp.CONTROL, "PAUSE")

    async def async_media_stop(self) -> None:
        await self._async_command(bdp.CONTROL, "STOP")

    async def async_media_next_track(self) -> None:
        await self._async_command(bdp.CONTROL, "NEXT")

    async def async_media_previous_track(self) -> None:
        await self._async_command(bdp.CONTROL, "PREVIOUS")

    async def async_send_button(self, button: str) -> None:
        """Press a raw player button, e.g. MENU or TITLE."""
        await self._async_command(bdp.BUTTON, button)
