"""HTTP transport shared by every portal request of one status check.

The session (cookie jar) is established once by the login bootstrap and is
only read afterwards, so concurrent island polls can share it without locks.

Uses aiohttp so that island resolutions can run concurrently on one event
loop.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from types import TracebackType

import aiohttp

from ..const import DEFAULT_TIMEOUT
from .exceptions import CannotConnectError, ParsingError

_LOGGER = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) kaktus-monitor"


class SessionTransport(ABC):
    """Authenticated request channel used by the login, resolver and assembler."""

    @abstractmethod
    async def request(self, url: str) -> tuple[int, str]:
        """GET url within the shared session.

        Returns:
            (HTTP status, response body)

        Raises:
            CannotConnectError: On connection failure or timeout
            ParsingError: If the body cannot be decoded
        """
        raise NotImplementedError


class PortalSession(SessionTransport):
    """aiohttp-backed transport with one cookie jar for the whole check.

    Usage:
        async with PortalSession(timeout=10) as transport:
            status, body = await transport.request(url)
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        """Initialize transport.

        Args:
            timeout: Per-request total timeout in seconds
        """
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> PortalSession:
        self._session = aiohttp.ClientSession(
            cookie_jar=aiohttp.CookieJar(),
            headers={"User-Agent": USER_AGENT},
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def request(self, url: str) -> tuple[int, str]:
        """GET url with an independent timeout."""
        if self._session is None:
            raise RuntimeError("PortalSession used outside of 'async with'")

        try:
            async with self._session.get(url, timeout=self._timeout) as response:
                body = await response.text()
                _LOGGER.debug("GET %s -> %d (%d bytes)", url, response.status, len(body))
                return response.status, body
        except (TimeoutError, asyncio.TimeoutError) as e:
            _LOGGER.debug("GET %s timed out", url)
            raise CannotConnectError("Request timed out", url=url) from e
        except aiohttp.ClientError as e:
            _LOGGER.debug("GET %s failed: %s", url, e)
            raise CannotConnectError(f"Request failed: {e}", url=url) from e
        except UnicodeDecodeError as e:
            _LOGGER.debug("GET %s returned an undecodable body: %s", url, e)
            raise ParsingError("Undecodable response body", field=url) from e
