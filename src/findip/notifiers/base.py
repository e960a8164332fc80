"""Notifier protocol shared by all backends."""

from typing import Protocol

from findip.errors import FindIpError
from findip.ip_query import IpAddress


class IpNotifier(Protocol):
    """Protocol for notification backends.

    Implementations never raise: delivery problems are logged and reported
    through the return value of notify_success.
    """

    async def notify_success(self, ip: IpAddress) -> bool:
        """Report a newly acquired IP. Returns True if delivered."""
        ...

    async def notify_error(self, error: FindIpError) -> None:
        """Report a failed acquisition."""
        ...
