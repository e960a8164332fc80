"""Bounded, thread-safe history of IP observations."""

import threading
from dataclasses import dataclass
from datetime import datetime

from findip.errors import NoIpAddressesFoundError
from findip.ip_query import IpAddress

# Only the latest and the previous observation are ever compared.
MAX_RESULTS = 2


@dataclass(frozen=True)
class IpResult:
    """One recorded observation."""

    ip: IpAddress
    checked_at: datetime


class IpResults:
    """Most-recent-first store of the last two observations.

    Index 0 is the latest observation, index 1 the one before it. All access
    goes through a single lock, so concurrent ticks never see a half-updated
    history. The lock is only held for in-memory work.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._results: list[IpResult] = []

    def add_result(self, ip: IpAddress, checked_at: datetime) -> None:
        """Record an observation, evicting the oldest if full."""
        with self._lock:
            if len(self._results) >= MAX_RESULTS:
                del self._results[MAX_RESULTS - 1:]
            self._results.insert(0, IpResult(ip=ip, checked_at=checked_at))

    def get_latest_ip(self) -> IpAddress:
        """Return the most recent IP.

        Raises:
            NoIpAddressesFoundError: If nothing has been recorded yet.
        """
        with self._lock:
            if not self._results:
                raise NoIpAddressesFoundError(
                    "No IP addresses were found in the result storage. "
                    "Most likely, a query has not been run."
                )
            return self._results[0].ip

    def ip_has_changed(self) -> bool:
        """Whether the latest IP differs from the previous one.

        The first observation always counts as a change.
        """
        with self._lock:
            if not self._results:
                return False
            if len(self._results) < 2:
                return True
            return self._results[0].ip != self._results[1].ip

    @property
    def results(self) -> tuple[IpResult, ...]:
        """Snapshot of the history, latest first."""
        with self._lock:
            return tuple(self._results)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)
