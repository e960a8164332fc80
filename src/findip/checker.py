"""One acquire → record → notify cycle."""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterable, Optional, Protocol

from findip.errors import FindIpError
from findip.ip_query import IpAddress
from findip.ip_results import IpResults
from findip.notifiers import IpNotifier

logger = logging.getLogger(__name__)


class IpAcquirer(Protocol):
    """Protocol for the IP lookup dependency."""

    async def acquire(self, services: Iterable[str]) -> IpAddress:
        """Returns the agreed IP. Raises FindIpError on failure."""
        ...


class TickOutcome(Enum):
    """What a single tick ended up doing."""

    NOTIFIED = "notified"
    UNCHANGED = "unchanged"
    DELIVERY_FAILED = "delivery_failed"
    QUERY_FAILED = "query_failed"


class IpChecker:
    """Runs ticks against a shared result history.

    Each tick is independent. Failed lookups are always reported through
    notify_error and leave the history untouched; successful ones are
    recorded and reported according to ``notify_on_change_only``.
    """

    def __init__(
        self,
        query: IpAcquirer,
        notifier: IpNotifier,
        services: Iterable[str],
        notify_on_change_only: bool = False,
        results: Optional[IpResults] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """Initialize checker.

        Args:
            query: IP lookup (usually IpQuery).
            notifier: Backend receiving success/error reports.
            services: Lookup endpoint URLs.
            notify_on_change_only: Only report successes that changed the IP.
            results: History to record into; a fresh one if None.
            clock: Timestamp source for observations.
        """
        self._query = query
        self._notifier = notifier
        self._services = list(services)
        self._notify_on_change_only = notify_on_change_only
        self._results = results if results is not None else IpResults()
        self._clock = clock

    @property
    def results(self) -> IpResults:
        """The shared observation history."""
        return self._results

    async def tick(self) -> TickOutcome:
        """Run one acquire → record → notify cycle."""
        try:
            ip = await self._query.acquire(self._services)
        except FindIpError as e:
            logger.warning(f"IP query failed: {e}")
            await self._notifier.notify_error(e)
            return TickOutcome.QUERY_FAILED

        self._results.add_result(ip, self._clock())

        if self._notify_on_change_only and not self._results.ip_has_changed():
            logger.debug(f"IP unchanged ({ip}), skipping notification")
            return TickOutcome.UNCHANGED

        logger.info("Notifying IP %s", ip)
        if await self._notifier.notify_success(ip):
            return TickOutcome.NOTIFIED
        return TickOutcome.DELIVERY_FAILED
