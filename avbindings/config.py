"""Configuration schemas for the AV bindings."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

import voluptuous as vol

from .exceptions import ConfigurationError
from .monoprice.profiles import PROFILES, DeviceProfile, get_profile
from .panasonic.const import (
    CONTROL_URL,
    DEFAULT_REFRESH,
    MIN_REFRESH,
    MODEL_BD_PLAYER,
    NONCE_URL,
    PLAYER_MODELS,
)

CONF_HOST = "host"
CONF_PORT = "port"
CONF_MODEL = "model"
CONF_REFRESH = "refresh"
CONF_PLAYER_KEY = "player_key"
CONF_NUM_ZONES = "num_zones"
CONF_IGNORE_ZONES = "ignore_zones"
CONF_INPUT_LABELS = "input_labels"

DEFAULT_AMP_PORT = 4999
DEFAULT_AMP_MODEL = "amplifier"
DEFAULT_AMP_REFRESH = 15  # seconds
MIN_AMP_REFRESH = 5  # seconds


def clamped_interval(minimum: int):
    """Validator turning an interval below the minimum into the minimum."""

    def validate(value: Any) -> int:
        value = vol.Coerce(int)(value)
        return max(value, minimum)

    return validate


HOST_SCHEMA = vol.All(str, vol.Strip, vol.Length(min=1, msg="Host Name must be specified"))

PLAYER_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_HOST, msg="Host Name must be specified"): HOST_SCHEMA,
        vol.Optional(CONF_PLAYER_KEY, default=""): vol.Any(None, str),
        vol.Optional(CONF_REFRESH, default=DEFAULT_REFRESH): clamped_interval(MIN_REFRESH),
        vol.Optional(CONF_MODEL, default=MODEL_BD_PLAYER): vol.In(PLAYER_MODELS),
    },
    extra=vol.REMOVE_EXTRA,
)

AMPLIFIER_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_HOST, msg="Host Name must be specified"): HOST_SCHEMA,
        vol.Optional(CONF_PORT, default=DEFAULT_AMP_PORT): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=65535)
        ),
        vol.Optional(CONF_MODEL, default=DEFAULT_AMP_MODEL): vol.In(sorted(PROFILES)),
        vol.Optional(CONF_REFRESH, default=DEFAULT_AMP_REFRESH): clamped_interval(MIN_AMP_REFRESH),
        vol.Optional(CONF_NUM_ZONES): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional(CONF_IGNORE_ZONES, default=list): [str],
        vol.Optional(CONF_INPUT_LABELS, default=dict): {vol.Coerce(int): str},
    },
    extra=vol.REMOVE_EXTRA,
)


@dataclass(frozen=True)
class PlayerConfig:
    """Validated Panasonic player configuration."""

    host: str
    player_key: str = ""
    refresh: int = DEFAULT_REFRESH
    model: str = MODEL_BD_PLAYER

    @property
    def url(self) -> str:
        return CONTROL_URL.format(host=self.host)

    @property
    def nonce_url(self) -> str:
        return NONCE_URL.format(host=self.host)

    @property
    def auth_enabled(self) -> bool:
        """Commands are authenticated when a player key is set."""
        return bool(self.player_key)


@dataclass(frozen=True)
class AmplifierConfig:
    """Validated amplifier configuration."""

    host: str
    port: int
    profile: DeviceProfile
    refresh: int = DEFAULT_AMP_REFRESH
    zone_ids: Tuple[str, ...] = ()
    ignore_zones: Tuple[str, ...] = ()
    input_labels: Mapping[int, str] = field(default_factory=dict)


def _validate(schema: vol.Schema, data: Mapping[str, Any]) -> Dict[str, Any]:
    try:
        return schema(dict(data))
    except vol.MultipleInvalid as err:
        raise ConfigurationError(err.errors[0].msg) from err
    except vol.Invalid as err:
        raise ConfigurationError(err.msg) from err


def validate_player_config(data: Mapping[str, Any]) -> PlayerConfig:
    """Validate raw Panasonic configuration.

    Raises:
        ConfigurationError: Missing host or invalid value
    """
    conf = _validate(PLAYER_SCHEMA, data)
    return PlayerConfig(
        host=conf[CONF_HOST],
        player_key=conf[CONF_PLAYER_KEY] or "",
        refresh=conf[CONF_REFRESH],
        model=conf[CONF_MODEL],
    )


def validate_amplifier_config(data: Mapping[str, Any]) -> AmplifierConfig:
    """Validate raw amplifier configuration.

    Raises:
        ConfigurationError: Missing host, unknown model or invalid zones
    """
    conf = _validate(AMPLIFIER_SCHEMA, data)
    profile = get_profile(conf[CONF_MODEL])

    num_zones = conf.get(CONF_NUM_ZONES, profile.max_zones)
    if num_zones > profile.max_zones:
        raise ConfigurationError(
            f"{profile.name} supports at most {profile.max_zones} zones, got {num_zones}"
        )

    zone_ids = profile.zone_ids[:num_zones]
    configured_names = {profile.zone_index_to_name(zone_id) for zone_id in zone_ids}
    unknown = [name for name in conf[CONF_IGNORE_ZONES] if name not in configured_names]
    if unknown:
        raise ConfigurationError(f"Ignored zones are not configured: {', '.join(unknown)}")

    return AmplifierConfig(
        host=conf[CONF_HOST],
        port=conf[CONF_PORT],
        profile=profile,
        refresh=conf[CONF_REFRESH],
        zone_ids=tuple(zone_ids),
        ignore_zones=tuple(conf[CONF_IGNORE_ZONES]),
        input_labels=dict(conf[CONF_INPUT_LABELS]),
    )
