"""Channel ids for the Monoprice/Xantech binding."""

# Zone channels are "<zone name>#<field>", e.g. "zone1#volume"
POWER = "power"
SOURCE = "source"
VOLUME = "volume"
MUTE = "mute"
DND = "dnd"
TREBLE = "treble"
BASS = "bass"
BALANCE = "balance"
PAGE = "page"
KEYPAD = "keypad"

SWITCH_FIELDS = frozenset({POWER, MUTE, DND, PAGE, KEYPAD})

# Controller channels applied to every zone that is not ignored
ALL_GROUP = "all"
ALL_POWER = "allpower"
ALL_SOURCE = "allsource"
ALL_VOLUME = "allvolume"
ALL_MUTE = "allmute"

ALL_COMMANDS = {
    ALL_POWER: POWER,
    ALL_SOURCE: SOURCE,
    ALL_VOLUME: VOLUME,
    ALL_MUTE: MUTE,
}


def zone_channel(zone_name: str, field_name: str) -> str:
    """Channel id of a zone field."""
    return f"{zone_name}#{field_name}"
