"""HTTP transport for Panasonic Blu-ray players."""

import asyncio
import itertools
import logging
import time
from typing import Mapping, Optional

import aiohttp
import async_timeout

from ..exceptions import TransportError, TransportTimeoutError
from .const import DEFAULT_TIMEOUT, USER_AGENT

_LOGGER = logging.getLogger(__name__)

# Request trace ID counter for instrumentation
_trace_counter = itertools.count(1)


class PlayerConnection:
    """Posts form commands to the player's CGI endpoints."""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize transport.

        Args:
            session: Shared client session; one is created (and owned) if omitted
            timeout: Request timeout in seconds
        """
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None
        self.headers = {"User-Agent": USER_AGENT}

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the client session if this transport created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
        self._session = None

    async def post(self, url: str, fields: Mapping[str, str]) -> str:
        """POST a form body and return the response text.

        Raises:
            TransportError: Non-200 status or client error
            TransportTimeoutError: No response within the timeout
        """
        trace_id = next(_trace_counter)
        io_start = time.monotonic()
        session = self._get_session()

        try:
            async with async_timeout.timeout(self.timeout):
                async with session.post(url, data=dict(fields), headers=self.headers) as resp:
                    output = await resp.text()
                    status = resp.status
        except asyncio.TimeoutError as err:
            _LOGGER.warning(
                "req id=%d url=%s io_ms=%d ok=false err=Timeout",
                trace_id, url, int((time.monotonic() - io_start) * 1000),
            )
            raise TransportTimeoutError(f"Timeout posting to {url}") from err
        except aiohttp.ClientError as err:
            _LOGGER.warning(
                "req id=%d url=%s io_ms=%d ok=false err=%s",
                trace_id, url, int((time.monotonic() - io_start) * 1000), err,
            )
            raise TransportError(f"Error posting to {url}: {err}") from err

        _LOGGER.debug(
            "req id=%d url=%s status=%d io_ms=%d response=%r",
            trace_id, url, status, int((time.monotonic() - io_start) * 1000), output,
        )
        if status != 200:
            raise TransportError(f"Player response: {status} - {output}")

        return output
