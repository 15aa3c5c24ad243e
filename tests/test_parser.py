"""Tests for amplifier status line parsing."""

from dataclasses import replace

import pytest

from avbindings.exceptions import MalformedResponse
from avbindings.monoprice.models import ZoneStatus
from avbindings.monoprice.parser import format_status, parse
from avbindings.monoprice.profiles import (
    AMPLIFIER,
    MONOPRICE70V,
    PROFILES,
    XANTECH44,
    XANTECH88,
    _response,
)


def test_parse_amplifier_status():
    status = parse("#>1200010000130809100601", AMPLIFIER)

    assert status == ZoneStatus(
        zone="12",
        page="00",
        power="01",
        mute="00",
        dnd="00",
        volume=13,
        treble=8,
        bass=9,
        balance=10,
        source="06",
        keypad="01",
    )


def test_parse_strips_line_terminators():
    status = parse("  #>1100010000130809100601\r\n", AMPLIFIER)
    assert status.zone == "11"


def test_parse_xantech_status():
    status = parse("#1ZS PR0 SS1 VO0 MU1 TR7 BS7 BA32 LS0 PS0+", XANTECH44)

    assert status.zone == "1"
    assert status.power == "0"
    assert status.source == "1"
    assert status.volume == 0
    assert status.mute == "1"
    assert status.balance == 32
    assert status.dnd is None


def test_parse_xantech88_two_digit_zone():
    status = parse("#21ZS PR1 SS3 VO20 MU0 TR4 BS4 BA10 LS1 PS0+", XANTECH88)
    assert status.zone == "21"
    assert status.volume == 20


def test_parse_70v_formats():
    main = parse("?6ZS VO8 PO1 MU0 IS0+", MONOPRICE70V)
    assert main.populated() == {
        "zone": "6", "volume": 8, "power": "1", "mute": "0", "source": "0",
    }

    treble = parse("?3TR9+", MONOPRICE70V)
    assert treble.populated() == {"zone": "3", "treble": 9}

    balance = parse("?3BA32+", MONOPRICE70V)
    assert balance.populated() == {"zone": "3", "balance": 32}


@pytest.mark.parametrize("line", ["", "   ", "Command Error.", "#>12", "?11", "#1ZS PR0"])
def test_parse_no_match(line):
    assert parse(line, AMPLIFIER) is None


def test_parse_other_model_line_does_not_match():
    assert parse("#>1200010000130809100601", XANTECH44) is None
    assert parse("?6ZS VO8 PO1 MU0 IS0+", AMPLIFIER) is None


def test_parse_malformed_numeric_field():
    # device patterns only capture digits, so use a permissive layout
    loose = replace(
        XANTECH44,
        responses=(_response(r"^#(\d)VO(\w+)", ("zone", "volume"), "#{zone}VO{volume}"),),
    )
    with pytest.raises(MalformedResponse):
        parse("#1VOxx", loose)


@pytest.mark.parametrize(
    "profile, line",
    [
        (AMPLIFIER, "#>1200010000130809100601"),
        (XANTECH88, "#21ZS PR1 SS3 VO20 MU0 TR4 BS4 BA10 LS1 PS0+"),
        (MONOPRICE70V, "?6ZS VO8 PO1 MU0 IS0+"),
        (MONOPRICE70V, "?3BS7+"),
    ],
)
def test_format_status_reproduces_device_line(profile, line):
    assert format_status(parse(line, profile), profile) == line


def in_range_statuses(profile):
    """Statuses for every response layout, sweeping all zones and numeric ranges."""
    p = profile
    volumes = range(p.max_vol + 1)
    tones = range(p.min_tone + p.tone_offset, p.max_tone + p.tone_offset + 1)
    balances = range(p.min_bal + p.bal_offset, p.max_bal + p.bal_offset + 1)
    steps = max(len(volumes), len(tones), len(balances), len(p.zone_ids))

    for i in range(steps):
        values = {
            "zone": p.zone_ids[i % len(p.zone_ids)],
            "page": p.off_str,
            "power": p.on_str if i % 2 else p.off_str,
            "mute": p.off_str if i % 3 else p.on_str,
            "dnd": p.off_str,
            "volume": volumes[i % len(volumes)],
            "treble": tones[i % len(tones)],
            "bass": tones[-1 - i % len(tones)],
            "balance": balances[i % len(balances)],
            "source": p.format_number(p.first_source + i % p.num_sources),
            "keypad": p.on_str,
        }
        for response in p.responses:
            yield ZoneStatus(**{name: values[name] for name in response.fields})


@pytest.mark.parametrize("profile", list(PROFILES.values()), ids=list(PROFILES))
def test_format_then_parse_in_range_values(profile):
    statuses = list(in_range_statuses(profile))
    assert {status.zone for status in statuses} == set(profile.zone_ids)

    for status in statuses:
        assert parse(format_status(status, profile), profile) == status


def test_format_status_rejects_unknown_field_set():
    with pytest.raises(ValueError):
        format_status(ZoneStatus(zone="11", volume=3), AMPLIFIER)


def test_merge_partial_status():
    status = parse("?6ZS VO8 PO1 MU0 IS0+", MONOPRICE70V)
    status.merge(parse("?6TR9+", MONOPRICE70V))

    assert status.treble == 9
    assert status.volume == 8
