"""Data models for Monoprice/Xantech amplifiers."""

from dataclasses import dataclass, fields
from typing import Optional

NUMERIC_FIELDS = frozenset({"volume", "treble", "bass", "balance"})


@dataclass
class ZoneStatus:
    """Zone state as reported in one status line.

    Only the fields captured by the matched response pattern are set; the
    rest stay None. String fields keep the device's own digits ("01", "1").
    """

    zone: Optional[str] = None
    page: Optional[str] = None
    power: Optional[str] = None
    mute: Optional[str] = None
    dnd: Optional[str] = None
    volume: Optional[int] = None  # raw, 0 to max volume
    treble: Optional[int] = None  # raw, logical value + tone offset
    bass: Optional[int] = None  # raw, logical value + tone offset
    balance: Optional[int] = None  # raw, logical value + balance offset
    source: Optional[str] = None
    keypad: Optional[str] = None

    def populated(self) -> dict:
        """Return the fields that carry a value."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def merge(self, other: "ZoneStatus") -> None:
        """Copy the populated fields of a (partial) status onto this one."""
        for name, value in other.populated().items():
            setattr(self, name, value)
