"""Periodic refresh job for device sessions.

Each device session owns one RefreshJob. The job runs the session's refresh
callback with a fixed delay between runs, so a slow tick pushes the next one
back instead of stacking up behind it:

    start() ──► tick ──► sleep(interval) ──► tick ──► ... ──► cancel()

Errors raised by a tick are logged and the job keeps running. Sessions are
expected to absorb device errors themselves; this is the last line so that
one bad tick never ends polling.
"""

import asyncio
import itertools
import logging
import time
from typing import Awaitable, Callable, Optional

_LOGGER = logging.getLogger(__name__)

# Tick counter for log correlation
_tick_counter = itertools.count(1)


class RefreshJob:
    """Recurring asyncio task calling an async refresh callback."""

    def __init__(
        self,
        name: str,
        refresh_fn: Callable[[], Awaitable[None]],
        interval: float,
        initial_delay: float = 0.0,
    ) -> None:
        """Initialize the job.

        Args:
            name: Label used in log lines
            refresh_fn: Coroutine function run on every tick
            interval: Delay in seconds between the end of one tick and the next
            initial_delay: Delay before the first tick
        """
        self.name = name
        self.interval = interval
        self.initial_delay = initial_delay
        self._refresh_fn = refresh_fn
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        """Check if the job is scheduled."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the job on the running event loop."""
        if self.is_running:
            return

        self._task = asyncio.get_running_loop().create_task(self._run())
        _LOGGER.debug("Refresh job %s started interval=%.1fs", self.name, self.interval)

    async def cancel(self) -> None:
        """Cancel the job and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        _LOGGER.debug("Refresh job %s cancelled", self.name)

    async def _run(self) -> None:
        if self.initial_delay > 0:
            await asyncio.sleep(self.initial_delay)

        while True:
            tick_id = next(_tick_counter)
            tick_start = time.monotonic()
            try:
                await self._refresh_fn()
                _LOGGER.debug(
                    "job=%s tick=%d duration_ms=%d ok=true",
                    self.name, tick_id, int((time.monotonic() - tick_start) * 1000),
                )
            except asyncio.CancelledError:
                raise
            except Exception as err:
                _LOGGER.error(
                    "job=%s tick=%d duration_ms=%d ok=false err=%s",
                    self.name, tick_id, int((time.monotonic() - tick_start) * 1000), err,
                )

            await asyncio.sleep(self.interval)
