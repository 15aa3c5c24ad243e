"""Media player platform for Monoprice/Xantech whole house amplifiers."""
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
from homeassistant.const import CONF_HOST, CONF_NAME, CONF_PORT, EVENT_HOMEASSISTANT_STOP
from homeassistant.core import HomeAssistant
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import (
    CoordinatorEntity,
    DataUpdateCoordinator,
    UpdateFailed,
)

from avbindings import BindingError, ChannelCache, ConfigurationError, ThingStatus
from avbindings.config import (
    DEFAULT_AMP_MODEL,
    DEFAULT_AMP_PORT,
    DEFAULT_AMP_REFRESH,
    validate_amplifier_config,
)
from avbindings.monoprice import PROFILES, AmplifierSession
from avbindings.monoprice.const import (
    BALANCE,
    BASS,
    DND,
    MUTE,
    POWER,
    SOURCE,
    TREBLE,
    VOLUME,
    zone_channel,
)

from .const import (
    ATTR_BALANCE,
    ATTR_BASS,
    ATTR_DND,
    ATTR_TREBLE,
    ATTR_ZONE_NAME,
    CONF_IGNORE_ZONES,
    CONF_INPUT_LABELS,
    CONF_MODEL,
    CONF_NUM_ZONES,
    CONF_REFRESH,
    DEFAULT_NAME,
    DOMAIN,
)

_LOGGER = logging.getLogger(__name__)

PLATFORM_SCHEMA = PLATFORM_SCHEMA.extend(
    {
        vol.Required(CONF_HOST): cv.string,
        vol.Optional(CONF_NAME, default=DEFAULT_NAME): cv.string,
        vol.Optional(CONF_PORT, default=DEFAULT_AMP_PORT): cv.port,
        vol.Optional(CONF_MODEL, default=DEFAULT_AMP_MODEL): vol.In(sorted(PROFILES)),
        vol.Optional(CONF_REFRESH, default=DEFAULT_AMP_REFRESH): cv.positive_int,
        vol.Optional(CONF_NUM_ZONES): cv.positive_int,
        vol.Optional(CONF_IGNORE_ZONES, default=[]): vol.All(cv.ensure_list, [cv.string]),
        vol.Optional(CONF_INPUT_LABELS, default={}): {vol.Coerce(int): cv.string},
    }
)


async def async_setup_platform(
    hass: HomeAssistant,
    config: dict[str, Any],
    async_add_entities: AddEntitiesCallback,
    discovery_info: dict[str, Any] | None = None,
) -> None:
    """Set up one media player per configured amplifier zone."""
    try:
        amp_config = validate_amplifier_config(config)
    except ConfigurationError as err:
        _LOGGER.error("Invalid amplifier configuration: %s", err)
        return

    listener = ChannelCache()
    session = AmplifierSession.from_config(amp_config, listener)
    await session.async_initialize()

    async def async_update_data() -> dict[str, Any]:
        """Poll every zone and hand the channel values to the entities."""
        refresh_start = time.monotonic()
        await session.async_refresh()
        refresh_ms = int((time.monotonic() - refresh_start) * 1000)

        if listener.status == ThingStatus.OFFLINE:
            _LOGGER.debug(
                "monoprice: coordinator stage=refresh duration_ms=%d ok=false err=%s",
                refresh_ms, listener.message,
            )
            raise UpdateFailed(listener.message or "Amplifier offline")

        _LOGGER.debug(
            "monoprice: coordinator stage=refresh duration_ms=%d zones=%d ok=true",
            refresh_ms, len(amp_config.zone_ids),
        )
        return listener.snapshot()

    coordinator = DataUpdateCoordinator(
        hass,
        _LOGGER,
        name=f"{amp_config.profile.name} ({amp_config.host})",
        update_method=async_update_data,
        update_interval=timedelta(seconds=amp_config.refresh),
    )
    await coordinator.async_refresh()

    async def async_stop(_event) -> None:
        await session.stop()

    hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, async_stop)

    name = config[CONF_NAME]
    async_add_entities(
        [
            AmplifierZone(coordinator, session, listener, name, zone_name)
            for zone_name in session.zone_names
        ]
    )


class AmplifierZone(CoordinatorEntity, MediaPlayerEntity):
    """Representation of one amplifier zone."""

    _attr_has_entity_name = True
    _attr_should_poll = False  # Coordinator handles polling
    _attr_icon = "mdi:speaker"
    _attr_supported_features = (
        MediaPlayerEntityFeature.TURN_ON
        | MediaPlayerEntityFeature.TURN_OFF
        | MediaPlayerEntityFeature.VOLUME_SET
        | MediaPlayerEntityFeature.VOLUME_MUTE
        | MediaPlayerEntityFeature.SELECT_SOURCE
    )

    def __init__(
        self,
        coordinator: DataUpdateCoordinator,
        session: AmplifierSession,
        listener: ChannelCache,
        amp_name: str,
        zone_name: str,
    ) -> None:
        """Initialize the zone."""
        super().__init__(coordinator)

        self._session = session
        self._listener = listener
        self._amp_name = amp_name
        self._zone_name = zone_name
        self._attr_unique_id = f"{DOMAIN}_{session.config.host}_{zone_name}"
        self._attr_name = zone_name

        # (source value, label) in input order
        self._sources = session.profile.source_labels(dict(session.config.input_labels))

    def _channel(self, field_name: str) -> Any:
        if not self.coordinator.data:
            return None
        return self.coordinator.data.get(zone_channel(self._zone_name, field_name))

    @property
    def device_info(self) -> DeviceInfo:
        """Return device info."""
        host = self._session.config.host
        return DeviceInfo(
            identifiers={(DOMAIN, host)},
            name=self._amp_name,
            model=self._session.profile.name,
            manufacturer="Monoprice",
        )

    @property
    def available(self) -> bool:
        """Return if entity is available."""
        return self.coordinator.last_update_success

    @property
    def state(self) -> MediaPlayerState | None:
        """Return the state of the zone."""
        power = self._channel(POWER)
        if power is None:
            return None  # Unknown state until device reports
        return MediaPlayerState.ON if power else MediaPlayerState.OFF

    @property
    def volume_level(self) -> float | None:
        """Return the volume level (0.0 to 1.0)."""
        volume = self._channel(VOLUME)
        if volume is None:
            return None
        return volume / 100

    @property
    def is_volume_muted(self) -> bool | None:
        return self._channel(MUTE)

    @property
    def source_list(self) -> list[str]:
        return [label for _, label in self._sources]

    @property
    def source(self) -> str | None:
        """Return the current input source."""
        source = self._channel(SOURCE)
        if source is None:
            return None
        for value, label in self._sources:
            if int(value) == source:
                return label
        return None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return additional state attributes."""
        return {
            ATTR_ZONE_NAME: self._zone_name,
            ATTR_TREBLE: self._channel(TREBLE),
            ATTR_BASS: self._channel(BASS),
            ATTR_BALANCE: self._channel(BALANCE),
            ATTR_DND: self._channel(DND),
        }

    async def _async_command(self, field_name: str, value: Any) -> None:
        channel = zone_channel(self._zone_name, field_name)
        try:
            await self._session.async_handle_command(channel, value)
        except BindingError as err:
            _LOGGER.error("Failed to set %s=%s: %s", channel, value, err)
            return

        # Update local state immediately for responsiveness
        self.coordinator.async_set_updated_data(self._listener.snapshot())

    async def async_turn_on(self) -> None:
        """Turn the zone on."""
        await self._async_command(POWER, True)

    async def async_turn_off(self) -> None:
        """Turn the zone off."""
        await self._async_command(POWER, False)

    async def async_set_volume_level(self, volume: float) -> None:
        """Set volume level (0.0 to 1.0)."""
        percent = max(0, min(100, round(volume * 100)))
        await self._async_command(VOLUME, percent)

    async def async_mute_volume(self, mute: bool) -> None:
        await self._async_command(MUTE, mute)

    async def async_select_source(self, source: str) -> None:
        """Select input source by label."""
        for value, label in self._sources:
            if label == source:
                await self._async_command(SOURCE, int(value))
                return

        _LOGGER.error("Unknown source %s for %s", source, self._zone_name)
