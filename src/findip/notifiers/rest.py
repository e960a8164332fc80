"""REST notifier: calls a webhook with the IP address templated in."""

import asyncio
import json
import logging
from typing import Optional

import aiohttp

from findip.config import RestApiNotifierConfig
from findip.errors import FindIpError, RestRequestFailedError
from findip.ip_query import IpAddress

logger = logging.getLogger(__name__)

IP_TOKEN = "{{TOKEN_IP_ADDRESS}}"


def substitute_ip(template: str, ip: str) -> str:
    """Replace every occurrence of the IP token, literally and case-sensitively."""
    return template.replace(IP_TOKEN, ip)


def serialize_body(body: dict[str, str]) -> str:
    """Compact JSON, e.g. ``{"ip":"{{TOKEN_IP_ADDRESS}}"}``."""
    return json.dumps(body, separators=(",", ":"))


class RestApiNotifier:
    """Sends a single templated request per notification.

    The token is substituted after JSON serialization, so it is a plain
    string replace with no escaping.
    """

    # Request timeout
    REQUEST_TIMEOUT = 10.0  # seconds

    def __init__(
        self,
        config: RestApiNotifierConfig,
        http_session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize notifier.

        Args:
            config: Webhook url, method, headers and body template.
            http_session: Optional aiohttp session (for testing).
        """
        self._config = config
        self._session = http_session
        self._owns_session = http_session is None

    async def __aenter__(self):
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *args):
        await self.close()

    def build_request(self, ip: IpAddress) -> tuple[str, str]:
        """Return the (url, body) pair to send for ``ip``."""
        text = str(ip)
        url = substitute_ip(self._config.url, text)
        body = substitute_ip(serialize_body(self._config.body), text)
        return url, body

    async def notify_success(self, ip: IpAddress) -> bool:
        url, body = self.build_request(ip)
        try:
            await self._send(url, body)
        except RestRequestFailedError as e:
            logger.error(str(e))
            return False
        logger.info(f"Sent IP address via {self._config.method} {url}")
        return True

    async def notify_error(self, error: FindIpError) -> None:
        logger.error(f"IP query failed, webhook not called: {error}")

    async def _send(self, url: str, body: str) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

        try:
            async with self._session.request(
                self._config.method,
                url,
                data=body,
                headers=self._config.headers,
                timeout=aiohttp.ClientTimeout(total=self.REQUEST_TIMEOUT),
            ) as resp:
                if resp.status < 200 or resp.status >= 300:
                    text = await resp.text(errors="replace")
                    raise RestRequestFailedError(
                        f"{url} returned {resp.status}: {text[:100]}"
                    )
        # ValueError covers UnicodeDecodeError and bad URLs
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise RestRequestFailedError(f"{url}: {e}")

    async def close(self) -> None:
        """Close the HTTP session if owned."""
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None
