"""Monoprice and Xantech multi-zone amplifier client."""

from .profiles import PROFILES, DeviceProfile, get_profile
from .models import ZoneStatus
from .parser import format_status, parse
from .commands import AmplifierCommands
from .connection import AmplifierConnection
from .client import AmplifierClient
from .session import AmplifierSession

__all__ = [
    "PROFILES",
    "AmplifierClient",
    "AmplifierCommands",
    "AmplifierConnection",
    "AmplifierSession",
    "DeviceProfile",
    "ZoneStatus",
    "format_status",
    "get_profile",
    "parse",
]
