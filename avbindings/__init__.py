"""Async clients for Panasonic Blu-ray players and Monoprice/Xantech amplifiers."""

from .exceptions import (
    AuthComputationError,
    BindingError,
    CommandError,
    ConfigurationError,
    MalformedResponse,
    TransportError,
    TransportTimeoutError,
)
from .models import UNDEF, ChannelCache, StateListener, ThingStatus, ThingStatusDetail
from .scheduler import RefreshJob

__all__ = [
    "AuthComputationError",
    "BindingError",
    "ChannelCache",
    "CommandError",
    "ConfigurationError",
    "MalformedResponse",
    "RefreshJob",
    "StateListener",
    "ThingStatus",
    "ThingStatusDetail",
    "TransportError",
    "TransportTimeoutError",
    "UNDEF",
]
