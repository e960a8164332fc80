"""Notification backends.

The set of backends is closed: each notifier config variant maps to exactly
one implementation via create_notifier().
"""

from typing import Optional

import aiohttp

from findip.config import (
    FileNotifierConfig,
    NotifierConfig,
    RestApiNotifierConfig,
    S3NotifierConfig,
    StdoutNotifierConfig,
)
from findip.errors import InvalidInputError

from .base import IpNotifier
from .file import FileNotifier
from .rest import IP_TOKEN, RestApiNotifier
from .s3 import AssumeRoleClientProvider, S3ClientProvider, S3Notifier
from .stdout import StdoutNotifier


def create_notifier(
    config: NotifierConfig,
    http_session: Optional[aiohttp.ClientSession] = None,
    s3_client_provider: Optional[S3ClientProvider] = None,
) -> IpNotifier:
    """Build the notifier for a config variant.

    Args:
        config: One of the notifier config dataclasses.
        http_session: Shared session for the REST notifier.
        s3_client_provider: Client provider for the S3 notifier.

    Raises:
        InvalidInputError: If the config is not a known variant.
    """
    if isinstance(config, FileNotifierConfig):
        return FileNotifier(config)
    if isinstance(config, S3NotifierConfig):
        return S3Notifier(config, client_provider=s3_client_provider)
    if isinstance(config, RestApiNotifierConfig):
        return RestApiNotifier(config, http_session=http_session)
    if isinstance(config, StdoutNotifierConfig):
        return StdoutNotifier()
    raise InvalidInputError(f"unsupported notifier config: {config!r}")


__all__ = [
    "AssumeRoleClientProvider",
    "FileNotifier",
    "IP_TOKEN",
    "IpNotifier",
    "RestApiNotifier",
    "S3ClientProvider",
    "S3Notifier",
    "StdoutNotifier",
    "create_notifier",
]
