"""Panasonic Blu-ray player client."""

from .auth import check_algorithm, compute_digest
from .connection import PlayerConnection
from .player import PanasonicPlayer, PlayerState

__all__ = [
    "PanasonicPlayer",
    "PlayerConnection",
    "PlayerState",
    "check_algorithm",
    "compute_digest",
]
