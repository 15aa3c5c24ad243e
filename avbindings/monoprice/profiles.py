"""Per-model protocol descriptions for Monoprice and Xantech amplifiers.

Every supported amplifier speaks a variant of the same ASCII protocol:

    command:  <cmd prefix><zone id><token><value><cmd suffix>     <11PR01\\r
    query:    <query prefix><zone id><query suffix><cmd suffix>   ?11\\r
    status:   <resp prefix>...fixed fields...                     #>1100010000130809100601

What differs between models is the prefixes, the tokens, the numeric ranges
and the layout of the status line. A DeviceProfile captures all of that for
one model. Profiles are immutable and shared by every session of that model.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, NamedTuple, Optional, Pattern, Tuple

from ..exceptions import ConfigurationError


class ResponseFormat(NamedTuple):
    """A status line layout: the pattern, its group names and a render template."""

    pattern: Pattern
    fields: Tuple[str, ...]
    template: str


def _response(regex: str, fields: Tuple[str, ...], template: str) -> ResponseFormat:
    return ResponseFormat(re.compile(regex), fields, template)


ON_STR = "1"
OFF_STR = "0"
ON_STR_PAD = "01"
OFF_STR_PAD = "00"


@dataclass(frozen=True)
class DeviceProfile:
    """Command/response grammar and numeric bounds of one amplifier model."""

    name: str
    cmd_prefix: str
    cmd_suffix: str
    query_prefix: str
    query_suffix: str
    resp_prefix: str
    power_cmd: str
    source_cmd: str
    volume_cmd: str
    mute_cmd: str
    treble_cmd: str
    bass_cmd: str
    balance_cmd: str
    dnd_cmd: str  # empty when the model has no do-not-disturb
    max_src: int
    max_vol: int
    min_tone: int
    max_tone: int
    tone_offset: int
    min_bal: int
    max_bal: int
    bal_offset: int
    max_zones: int
    num_sources: int
    pad_numbers: bool
    zone_ids: Tuple[str, ...]
    responses: Tuple[ResponseFormat, ...]  # primary full-status layout first
    extra_query_cmds: Tuple[str, ...] = ()
    first_source: int = 1
    _zone_names: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.zone_ids) != self.max_zones:
            raise ValueError(
                f"{self.name}: {len(self.zone_ids)} zone ids for {self.max_zones} zones"
            )
        if len(set(self.zone_ids)) != len(self.zone_ids):
            raise ValueError(f"{self.name}: duplicate zone ids")

        for token_name in (
            "power_cmd", "source_cmd", "volume_cmd", "mute_cmd",
            "treble_cmd", "bass_cmd", "balance_cmd",
        ):
            if not getattr(self, token_name):
                raise ValueError(f"{self.name}: {token_name} must not be empty")

        if not self.responses:
            raise ValueError(f"{self.name}: at least one response format is required")

        zone_names = {
            zone_id: f"zone{index}" for index, zone_id in enumerate(self.zone_ids, start=1)
        }
        object.__setattr__(self, "_zone_names", MappingProxyType(zone_names))

    @property
    def supports_dnd(self) -> bool:
        """Check if the model has a do-not-disturb command."""
        return bool(self.dnd_cmd)

    @property
    def on_str(self) -> str:
        return ON_STR_PAD if self.pad_numbers else ON_STR

    @property
    def off_str(self) -> str:
        return OFF_STR_PAD if self.pad_numbers else OFF_STR

    @property
    def zone_names(self) -> List[str]:
        """Logical zone names in zone index order."""
        return [self._zone_names[zone_id] for zone_id in self.zone_ids]

    def zone_index_to_name(self, zone_id: str) -> Optional[str]:
        """Map a device zone id ("12") to its logical name ("zone2")."""
        return self._zone_names.get(zone_id)

    def name_to_zone_index(self, zone_name: str) -> Optional[str]:
        """Map a logical zone name ("zone2") back to the device zone id ("12")."""
        for zone_id, name in self._zone_names.items():
            if name == zone_name:
                return zone_id
        return None

    def format_number(self, value: int) -> str:
        """Render a numeric command value the way the model expects it."""
        if self.pad_numbers:
            return f"{value:02d}"
        return str(value)

    def source_labels(self, labels: Dict[int, str]) -> List[Tuple[str, str]]:
        """Build (source value, label) pairs for the model's inputs.

        Args:
            labels: Configured labels keyed by input number (1-based)
        """
        return [
            (str(self.first_source + number - 1), labels.get(number, f"Source {number}"))
            for number in range(1, self.num_sources + 1)
        ]


# Monoprice 10761 / DAX66 status string: #>1200010000130809100601
_MONOPRICE_FIELDS = (
    "zone", "page", "power", "mute", "dnd", "volume",
    "treble", "bass", "balance", "source", "keypad",
)
_MONOPRICE_RESPONSE = _response(
    r"^#>(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})",
    _MONOPRICE_FIELDS,
    "#>{zone}{page}{power}{mute}{dnd}{volume:02d}{treble:02d}{bass:02d}{balance:02d}{source}{keypad}",
)

# Monoprice 70v 31028 status string: ?6ZS VO8 PO1 MU0 IS0+
# Treble, bass and balance are reported by separate queries.
_MONOPRICE70V_RESPONSES = (
    _response(
        r"^\?(\d)ZS VO(\d{1,2}) PO(\d) MU(\d) IS(\d)",
        ("zone", "volume", "power", "mute", "source"),
        "?{zone}ZS VO{volume} PO{power} MU{mute} IS{source}+",
    ),
    _response(r"^\?(\d)TR(\d{1,2})", ("zone", "treble"), "?{zone}TR{treble}+"),
    _response(r"^\?(\d)BS(\d{1,2})", ("zone", "bass"), "?{zone}BS{bass}+"),
    _response(r"^\?(\d)BA(\d{1,2})", ("zone", "balance"), "?{zone}BA{balance}+"),
)

# Xantech status string: #1ZS PR0 SS1 VO0 MU1 TR7 BS7 BA32 LS0 PS0+
_XANTECH_RESPONSE = _response(
    r"^#(\d{1,2})ZS PR(\d) SS(\d) VO(\d{1,2}) MU(\d) TR(\d{1,2}) BS(\d{1,2}) BA(\d{1,2}) LS(\d) PS(\d)",
    ("zone", "power", "source", "volume", "mute", "treble", "bass", "balance", "keypad", "page"),
    "#{zone}ZS PR{power} SS{source} VO{volume} MU{mute} TR{treble} BS{bass} BA{balance} LS{keypad} PS{page}+",
)

# Kept as 'amplifier' so existing configurations keep working
AMPLIFIER = DeviceProfile(
    name="amplifier",
    cmd_prefix="<", cmd_suffix="\r", query_prefix="?", query_suffix="", resp_prefix="#>",
    power_cmd="PR", source_cmd="CH", volume_cmd="VO", mute_cmd="MU",
    treble_cmd="TR", bass_cmd="BS", balance_cmd="BL", dnd_cmd="DT",
    max_src=6, max_vol=38, min_tone=-7, max_tone=7, tone_offset=7,
    min_bal=-10, max_bal=10, bal_offset=10, max_zones=18, num_sources=6,
    pad_numbers=True,
    zone_ids=(
        "11", "12", "13", "14", "15", "16",
        "21", "22", "23", "24", "25", "26",
        "31", "32", "33", "34", "35", "36",
    ),
    responses=(_MONOPRICE_RESPONSE,),
)

MONOPRICE70V = DeviceProfile(
    name="monoprice70v",
    cmd_prefix="!", cmd_suffix="+\r", query_prefix="?", query_suffix="ZS", resp_prefix="?",
    power_cmd="PR", source_cmd="IS", volume_cmd="VO", mute_cmd="MU",
    treble_cmd="TR", bass_cmd="BS", balance_cmd="BA", dnd_cmd="",
    max_src=2, max_vol=38, min_tone=-7, max_tone=7, tone_offset=7,
    min_bal=-32, max_bal=31, bal_offset=32, max_zones=6, num_sources=2,
    pad_numbers=False,
    zone_ids=("1", "2", "3", "4", "5", "6"),
    responses=_MONOPRICE70V_RESPONSES,
    extra_query_cmds=("TR", "BS", "BA"),
    first_source=0,
)

XANTECH44 = DeviceProfile(
    name="xantech44",
    cmd_prefix="!", cmd_suffix="+\r", query_prefix="?", query_suffix="ZD", resp_prefix="#",
    power_cmd="PR", source_cmd="CH", volume_cmd="VO", mute_cmd="MU",
    treble_cmd="TR", bass_cmd="BS", balance_cmd="BL", dnd_cmd="DT",
    max_src=8, max_vol=38, min_tone=-4, max_tone=4, tone_offset=4,
    min_bal=-10, max_bal=10, bal_offset=10, max_zones=4, num_sources=4,
    pad_numbers=False,
    zone_ids=("1", "2", "3", "4"),
    responses=(_XANTECH_RESPONSE,),
)

XANTECH88 = DeviceProfile(
    name="xantech88",
    cmd_prefix="!", cmd_suffix="+\r", query_prefix="?", query_suffix="ZD", resp_prefix="#",
    power_cmd="PR", source_cmd="CH", volume_cmd="VO", mute_cmd="MU",
    treble_cmd="TR", bass_cmd="BS", balance_cmd="BL", dnd_cmd="DT",
    max_src=8, max_vol=38, min_tone=-4, max_tone=4, tone_offset=4,
    min_bal=-10, max_bal=10, bal_offset=10, max_zones=24, num_sources=8,
    pad_numbers=False,
    zone_ids=(
        "11", "12", "13", "14", "15", "16", "17", "18",
        "21", "22", "23", "24", "25", "26", "27", "28",
        "31", "32", "33", "34", "35", "36", "37", "38",
    ),
    responses=(_XANTECH_RESPONSE,),
)

PROFILES: Mapping[str, DeviceProfile] = MappingProxyType(
    {profile.name: profile for profile in (AMPLIFIER, MONOPRICE70V, XANTECH44, XANTECH88)}
)


def get_profile(model: str) -> DeviceProfile:
    """Look up the profile of an amplifier model.

    Raises:
        ConfigurationError: Unknown model
    """
    try:
        return PROFILES[model]
    except KeyError:
        raise ConfigurationError(
            f"Unknown amplifier model '{model}', expected one of {sorted(PROFILES)}"
        ) from None
