"""Tests for configuration validation."""

import pytest

from avbindings.config import (
    DEFAULT_AMP_PORT,
    DEFAULT_AMP_REFRESH,
    MIN_AMP_REFRESH,
    validate_amplifier_config,
    validate_player_config,
)
from avbindings.exceptions import ConfigurationError
from avbindings.monoprice.profiles import AMPLIFIER, XANTECH44
from avbindings.panasonic.const import DEFAULT_REFRESH, MIN_REFRESH


def test_player_defaults():
    config = validate_player_config({"host": " 192.168.1.20 "})

    assert config.host == "192.168.1.20"
    assert config.player_key == ""
    assert config.refresh == DEFAULT_REFRESH
    assert config.model == "bd_player"
    assert not config.auth_enabled
    assert config.url == "http://192.168.1.20/WAN/dvdr/dvdr_ctrl.cgi"
    assert config.nonce_url == "http://192.168.1.20/cgi-bin/get_nonce.cgi"


def test_player_key_enables_auth():
    config = validate_player_config({"host": "bdp", "player_key": "ABCD", "model": "uhd_player"})
    assert config.auth_enabled
    assert config.model == "uhd_player"


def test_player_null_key():
    config = validate_player_config({"host": "bdp", "player_key": None})
    assert config.player_key == ""


@pytest.mark.parametrize("data", [{}, {"host": ""}, {"host": "   "}])
def test_player_host_required(data):
    with pytest.raises(ConfigurationError, match="Host Name must be specified"):
        validate_player_config(data)


def test_player_refresh_clamped_to_minimum():
    assert validate_player_config({"host": "bdp", "refresh": 1}).refresh == MIN_REFRESH
    assert validate_player_config({"host": "bdp", "refresh": "30"}).refresh == 30


def test_player_unknown_model():
    with pytest.raises(ConfigurationError):
        validate_player_config({"host": "bdp", "model": "vhs"})


def test_player_extra_keys_ignored():
    config = validate_player_config({"host": "bdp", "platform": "panasonicbr", "name": "Den"})
    assert config.host == "bdp"


def test_amplifier_defaults():
    config = validate_amplifier_config({"host": "bridge"})

    assert config.port == DEFAULT_AMP_PORT
    assert config.profile is AMPLIFIER
    assert config.refresh == DEFAULT_AMP_REFRESH
    assert config.zone_ids == AMPLIFIER.zone_ids
    assert config.ignore_zones == ()
    assert dict(config.input_labels) == {}


def test_amplifier_zone_subset():
    config = validate_amplifier_config({"host": "bridge", "num_zones": 8, "ignore_zones": ["zone8"]})

    assert config.zone_ids == ("11", "12", "13", "14", "15", "16", "21", "22")
    assert config.ignore_zones == ("zone8",)


def test_amplifier_too_many_zones():
    with pytest.raises(ConfigurationError):
        validate_amplifier_config({"host": "bridge", "model": "xantech44", "num_zones": 5})


def test_amplifier_ignored_zone_must_be_configured():
    with pytest.raises(ConfigurationError):
        validate_amplifier_config({"host": "bridge", "num_zones": 2, "ignore_zones": ["zone3"]})


def test_amplifier_model_and_labels():
    config = validate_amplifier_config(
        {"host": "bridge", "model": "xantech44", "input_labels": {"1": "TV"}, "refresh": 2}
    )

    assert config.profile is XANTECH44
    assert config.input_labels == {1: "TV"}
    assert config.refresh == MIN_AMP_REFRESH


@pytest.mark.parametrize(
    "data",
    [
        {"port": 4999},
        {"host": "bridge", "model": "nonesuch"},
        {"host": "bridge", "port": 0},
        {"host": "bridge", "num_zones": 0},
    ],
)
def test_amplifier_invalid(data):
    with pytest.raises(ConfigurationError):
        validate_amplifier_config(data)
