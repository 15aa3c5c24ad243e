"""Shared state models for AV bindings."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ThingStatus(Enum):
    """Device-level status."""

    UNKNOWN = "UNKNOWN"
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class ThingStatusDetail(Enum):
    """Reason attached to a device status."""

    NONE = "NONE"
    COMMUNICATION_ERROR = "COMMUNICATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class UnDefType(Enum):
    """Channel value meaning the state is not defined."""

    UNDEF = "UNDEF"

    def __repr__(self) -> str:
        return "UNDEF"


UNDEF = UnDefType.UNDEF


class StateListener:
    """Receives channel updates and status changes from a device session."""

    def update_state(self, channel: str, value: Any) -> None:
        """Handle a new value for a channel."""
        raise NotImplementedError

    def update_status(
        self,
        status: ThingStatus,
        detail: ThingStatusDetail = ThingStatusDetail.NONE,
        message: Optional[str] = None,
    ) -> None:
        """Handle a device status change."""
        raise NotImplementedError


@dataclass
class ChannelCache(StateListener):
    """Listener that keeps the latest value of every channel."""

    channels: Dict[str, Any] = field(default_factory=dict)
    status: ThingStatus = ThingStatus.UNKNOWN
    detail: ThingStatusDetail = ThingStatusDetail.NONE
    message: Optional[str] = None

    def update_state(self, channel: str, value: Any) -> None:
        self.channels[channel] = value

    def update_status(
        self,
        status: ThingStatus,
        detail: ThingStatusDetail = ThingStatusDetail.NONE,
        message: Optional[str] = None,
    ) -> None:
        self.status = status
        self.detail = detail
        self.message = message

    @property
    def is_online(self) -> bool:
        """Check if the device last reported ONLINE."""
        return self.status == ThingStatus.ONLINE

    def get(self, channel: str, default: Any = None) -> Any:
        """Get a channel value, treating UNDEF as missing."""
        value = self.channels.get(channel, default)
        if value is UNDEF:
            return default
        return value

    def snapshot(self) -> Dict[str, Any]:
        """Return a copy of the current channel values."""
        return dict(self.channels)
