"""Persistent async TCP connection to an amplifier's serial-over-IP bridge."""

import asyncio
import itertools
import logging
import random
import re
import time
from typing import Callable, Optional

from ..exceptions import TransportError, TransportTimeoutError

_LOGGER = logging.getLogger(__name__)

# Command trace ID counter for instrumentation
_trace_counter = itertools.count(1)

_LINE_SPLIT = re.compile(r"[\r\n]+")


class AmplifierConnection:
    """Manages the TCP connection and serializes exchanges with the amplifier."""

    def __init__(
        self,
        host: str,
        port: int,
        timeout: float = 3.0,
        max_retries: int = 3,
    ) -> None:
        """Initialize connection.

        Args:
            host: Bridge IP address or hostname
            port: Bridge TCP port
            timeout: Time allowed for one exchange in seconds
            max_retries: Maximum attempts per exchange
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self.max_retries = max_retries

        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._lock = asyncio.Lock()  # one exchange at a time

        # Reconnection backoff
        self._reconnect_delay = 0.5
        self._max_reconnect_delay = 30.0

    @property
    def is_connected(self) -> bool:
        """Check if connection is active."""
        return self._writer is not None and not self._writer.is_closing()

    @property
    def is_lock_available(self) -> bool:
        """Check if no exchange is in flight."""
        return not self._lock.locked()

    async def connect(self) -> None:
        """Open the connection to the bridge."""
        if self.is_connected:
            return

        try:
            _LOGGER.info("Connecting to amplifier at %s:%d", self.host, self.port)
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.timeout,
            )
            self._reconnect_delay = 0.5
        except asyncio.TimeoutError as err:
            raise TransportTimeoutError(
                f"Timeout connecting to {self.host}:{self.port}"
            ) from err
        except OSError as err:
            raise TransportError(f"Connection to {self.host}:{self.port} failed: {err}") from err

    async def disconnect(self) -> None:
        """Close the connection."""
        writer = self._writer
        self._reader = None
        self._writer = None
        if writer is None:
            return

        try:
            writer.close()
            await writer.wait_closed()
        except OSError as err:
            _LOGGER.debug("Error closing connection: %s", err)

    async def _reconnect_with_backoff(self) -> None:
        """Reconnect with exponential backoff + jitter."""
        await self.disconnect()

        delay = min(self._reconnect_delay, self._max_reconnect_delay)
        total_delay = delay + random.uniform(0, delay * 0.1)
        _LOGGER.info("Reconnecting to %s:%d in %.1f seconds", self.host, self.port, total_delay)
        await asyncio.sleep(total_delay)
        self._reconnect_delay = min(self._reconnect_delay * 2, self._max_reconnect_delay)

        await self.connect()

    async def send(
        self,
        command: str,
        is_complete: Optional[Callable[[str], bool]] = None,
    ) -> str:
        """Send one command line and collect the reply.

        Args:
            command: Full command line including the model's terminator
            is_complete: Predicate on received lines; reading stops at the first
                line it accepts. Without it, only a short settle read is done and
                whatever the device echoed is returned.

        Returns:
            Raw text received from the amplifier

        Raises:
            TransportError: Connection failed
            TransportTimeoutError: No complete reply within the timeout
        """
        trace_id = next(_trace_counter)
        queued_time = time.monotonic()

        async with self._lock:
            lock_wait_ms = int((time.monotonic() - queued_time) * 1000)
            last_error: Optional[Exception] = None

            for attempt in range(self.max_retries):
                io_start = time.monotonic()
                try:
                    if not self.is_connected:
                        await self.connect()

                    self._writer.write(command.encode("ascii"))
                    await self._writer.drain()

                    if is_complete is None:
                        response = await self._read_settle()
                    else:
                        response = await self._read_until(is_complete)

                    _LOGGER.debug(
                        "cmd id=%d cmd=%r lock_wait_ms=%d io_ms=%d bytes=%d ok=true",
                        trace_id, command, lock_wait_ms,
                        int((time.monotonic() - io_start) * 1000), len(response),
                    )
                    return response

                except asyncio.TimeoutError as err:
                    last_error = TransportTimeoutError(f"No reply to {command!r}")
                    last_error.__cause__ = err
                except (OSError, TransportError) as err:
                    last_error = err

                _LOGGER.warning(
                    "cmd id=%d cmd=%r io_ms=%d attempt=%d/%d ok=false err=%s",
                    trace_id, command, int((time.monotonic() - io_start) * 1000),
                    attempt + 1, self.max_retries, last_error,
                )
                if attempt < self.max_retries - 1:
                    try:
                        await self._reconnect_with_backoff()
                    except TransportError as err:
                        last_error = err
                else:
                    await self.disconnect()

            if isinstance(last_error, TransportError):
                raise last_error
            raise TransportError(f"Command {command!r} failed: {last_error}") from last_error

    async def _read_until(self, is_complete: Callable[[str], bool]) -> str:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        buffer = ""

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise asyncio.TimeoutError

            chunk = await asyncio.wait_for(self._reader.read(1024), timeout=remaining)
            if not chunk:
                raise TransportError("Connection closed by device")

            buffer += chunk.decode("ascii", errors="ignore")
            # the last piece is still being received unless a terminator follows it
            terminated_lines = _LINE_SPLIT.split(buffer)[:-1]
            if any(is_complete(line) for line in terminated_lines):
                return buffer

    async def _read_settle(self, settle: float = 0.1) -> str:
        """Collect whatever the device sends right after a set command."""
        try:
            chunk = await asyncio.wait_for(self._reader.read(1024), timeout=settle)
        except asyncio.TimeoutError:
            return ""
        return chunk.decode("ascii", errors="ignore")
