"""Shared helpers for the binding tests."""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine, List, Optional, Tuple, TypeVar

from avbindings.models import StateListener, ThingStatus, ThingStatusDetail

T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine synchronously for testing."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class RecordingListener(StateListener):
    """Listener that records every update in order."""

    def __init__(self) -> None:
        self.updates: List[Tuple[str, Any]] = []
        self.statuses: List[Tuple[ThingStatus, ThingStatusDetail, Optional[str]]] = []

    def update_state(self, channel: str, value: Any) -> None:
        self.updates.append((channel, value))

    def update_status(
        self,
        status: ThingStatus,
        detail: ThingStatusDetail = ThingStatusDetail.NONE,
        message: Optional[str] = None,
    ) -> None:
        self.statuses.append((status, detail, message))

    @property
    def channels(self) -> List[str]:
        return [channel for channel, _ in self.updates]

    @property
    def last_status(self) -> Optional[ThingStatus]:
        return self.statuses[-1][0] if self.statuses else None

    def values(self, channel: str) -> List[Any]:
        return [value for name, value in self.updates if name == channel]

    def clear(self) -> None:
        self.updates.clear()
        self.statuses.clear()
