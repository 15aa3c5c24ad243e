"""Monoprice/Xantech protocol command builders.

Command Format:
- Set:   <cmd prefix><zone id><token><value><cmd suffix>
         10761:  <11PR01\r      70V / Xantech:  !1PR1+\r
- Query: <query prefix><zone id><query suffix><cmd suffix>
         10761:  ?11\r          70V:  ?1ZS+\r      Xantech:  ?1ZD+\r
- Values are two-digit zero-padded on models that pad numbers (10761)

Tone and balance values are logical (centered on 0) and shifted by the
model's offset before they go on the wire.
"""

from typing import List

from ..exceptions import CommandError
from .profiles import DeviceProfile


class AmplifierCommands:
    """Command lines for one amplifier model."""

    def __init__(self, profile: DeviceProfile) -> None:
        self.profile = profile

    # ========================================================================
    # QUERIES
    # ========================================================================

    def query_zone(self, zone_id: str) -> str:
        """Query the full status of a zone."""
        p = self.profile
        return f"{p.query_prefix}{zone_id}{p.query_suffix}{p.cmd_suffix}"

    def extra_queries(self, zone_id: str) -> List[str]:
        """Single-field queries for models that leave fields out of the zone status.

        Example (70V): ?1TR+\\r, ?1BS+\\r, ?1BA+\\r
        """
        p = self.profile
        return [f"{p.query_prefix}{zone_id}{token}{p.cmd_suffix}" for token in p.extra_query_cmds]

    # ========================================================================
    # SET COMMANDS
    # ========================================================================

    def command(self, zone_id: str, token: str, value: str) -> str:
        """Build a raw set command line."""
        self.validate_zone(zone_id)
        p = self.profile
        return f"{p.cmd_prefix}{zone_id}{token}{value}{p.cmd_suffix}"

    def set_power(self, zone_id: str, power: bool) -> str:
        p = self.profile
        return self.command(zone_id, p.power_cmd, p.on_str if power else p.off_str)

    def set_mute(self, zone_id: str, mute: bool) -> str:
        p = self.profile
        return self.command(zone_id, p.mute_cmd, p.on_str if mute else p.off_str)

    def set_dnd(self, zone_id: str, dnd: bool) -> str:
        p = self.profile
        if not p.supports_dnd:
            raise CommandError(f"{p.name} has no do-not-disturb command")
        return self.command(zone_id, p.dnd_cmd, p.on_str if dnd else p.off_str)

    def set_source(self, zone_id: str, source: int) -> str:
        """Select an input; source is the model's own input number."""
        p = self.profile
        last_source = p.first_source + p.num_sources - 1
        if not p.first_source <= source <= last_source:
            raise CommandError(f"Source must be {p.first_source}-{last_source}, got {source}")
        return self.command(zone_id, p.source_cmd, p.format_number(source))

    def set_volume(self, zone_id: str, volume: int) -> str:
        """Set the raw volume (0 to max volume)."""
        p = self.profile
        if not 0 <= volume <= p.max_vol:
            raise CommandError(f"Volume must be 0-{p.max_vol}, got {volume}")
        return self.command(zone_id, p.volume_cmd, p.format_number(volume))

    def set_treble(self, zone_id: str, treble: int) -> str:
        return self._tone(zone_id, self.profile.treble_cmd, treble)

    def set_bass(self, zone_id: str, bass: int) -> str:
        return self._tone(zone_id, self.profile.bass_cmd, bass)

    def set_balance(self, zone_id: str, balance: int) -> str:
        p = self.profile
        if not p.min_bal <= balance <= p.max_bal:
            raise CommandError(f"Balance must be {p.min_bal}-{p.max_bal}, got {balance}")
        return self.command(zone_id, p.balance_cmd, p.format_number(balance + p.bal_offset))

    def _tone(self, zone_id: str, token: str, value: int) -> str:
        p = self.profile
        if not p.min_tone <= value <= p.max_tone:
            raise CommandError(f"Tone must be {p.min_tone}-{p.max_tone}, got {value}")
        return self.command(zone_id, token, p.format_number(value + p.tone_offset))

    # ========================================================================
    # VALIDATION HELPERS
    # ========================================================================

    def validate_zone(self, zone_id: str) -> None:
        """Validate the zone id belongs to the model."""
        if zone_id not in self.profile.zone_ids:
            raise CommandError(f"Zone {zone_id!r} is not a {self.profile.name} zone")
