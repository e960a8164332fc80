"""Public IP discovery by asking several lookup services."""

import asyncio
import ipaddress
import logging
from typing import Iterable, Optional, Union

import aiohttp

from findip.errors import IpConflictError, NoIpAddressesFoundError

logger = logging.getLogger(__name__)

IpAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class IpQuery:
    """Queries IP echo services and reconciles their answers.

    Every service is asked once, concurrently. A service that fails in any
    way (connection error, timeout, bad status, garbage body) contributes no
    reading. The remaining readings must agree on a single address.

    Usage:
        async with IpQuery() as query:
            ip = await query.acquire(["https://api.ipify.org/"])
    """

    # Request timeout
    REQUEST_TIMEOUT = 10.0  # seconds

    def __init__(self, http_session: Optional[aiohttp.ClientSession] = None):
        """Initialize query.

        Args:
            http_session: Optional aiohttp session (for testing).
        """
        self._session = http_session
        self._owns_session = http_session is None

    async def __aenter__(self):
        """Enter async context, creating session if needed."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *args):
        """Exit async context, closing owned session."""
        await self.close()

    async def acquire(self, services: Iterable[str]) -> IpAddress:
        """Ask every service for our IP and return the agreed address.

        Args:
            services: Lookup endpoint URLs, queried independently.

        Returns:
            The single IP address the services agree on.

        Raises:
            NoIpAddressesFoundError: No service returned a usable reading.
            IpConflictError: Services disagree; carries every raw reading.
        """
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

        services = list(services)
        responses = await asyncio.gather(*(self._fetch(url) for url in services))
        readings = [r for r in responses if r]

        # dict preserves first-occurrence order
        distinct = list(dict.fromkeys(ipaddress.ip_address(r) for r in readings))

        if not distinct:
            raise NoIpAddressesFoundError(
                f"No IP addresses were returned by any of {len(services)} service(s)"
            )
        if len(distinct) > 1:
            logger.warning("Services disagree on public IP: %s", readings)
            raise IpConflictError(readings)

        logger.debug("Services agree on public IP %s", distinct[0])
        return distinct[0]

    async def _fetch(self, url: str) -> Optional[str]:
        """Single lookup. Returns the stripped IP text or None."""
        try:
            async with self._session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=self.REQUEST_TIMEOUT),
            ) as resp:
                if resp.status < 200 or resp.status >= 300:
                    logger.warning(f"{url} returned {resp.status}")
                    return None
                text = (await resp.text()).strip()
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
            logger.warning(f"Lookup via {url} failed: {e}")
            return None

        try:
            ipaddress.ip_address(text)
        except ValueError:
            logger.warning(f"{url} returned a non-IP body: {text[:60]!r}")
            return None
        return text

    async def close(self) -> None:
        """Close the HTTP session if owned."""
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None
