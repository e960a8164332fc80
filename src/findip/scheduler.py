"""Cron-driven tick loop."""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from croniter import croniter

logger = logging.getLogger(__name__)


class CronScheduler:
    """Runs a tick callable on every cron fire time.

    Each tick runs as its own task so a slow notifier does not push back the
    next fire time. Ticks may therefore overlap.
    """

    def __init__(
        self,
        cron: str,
        tick: Callable[[], Awaitable[object]],
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize scheduler.

        Args:
            cron: Cron expression (5 fields, or 6 with trailing seconds).
            tick: Async callable invoked on every fire time.
            clock: Local-time clock the cron expression is evaluated in.
        """
        self._cron = cron
        self._tick = tick
        self._clock = clock
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._last_fire: Optional[datetime] = None
        self._ticks: set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        """Whether the loop is active."""
        return self._running

    def next_fire_time(self) -> datetime:
        """Next fire time strictly after both now and the last fire time."""
        base = self._clock()
        if self._last_fire is not None and self._last_fire > base:
            base = self._last_fire
        return croniter(self._cron, base).get_next(datetime)

    def next_delay(self) -> float:
        """Seconds until the next fire time."""
        return max(0.0, (self.next_fire_time() - self._clock()).total_seconds())

    async def start(self) -> None:
        """Start the loop. No-op if already running."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Scheduler started with cron {self._cron!r}")

    async def stop(self) -> None:
        """Stop the loop and wait for in-flight ticks."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._ticks:
            await asyncio.gather(*self._ticks, return_exceptions=True)
        logger.info("Scheduler stopped")

    async def run_forever(self) -> None:
        """Start and block until the loop ends."""
        await self.start()
        if self._task:
            await self._task

    async def _run_loop(self) -> None:
        while self._running:
            fire_time = self.next_fire_time()
            delay = max(0.0, (fire_time - self._clock()).total_seconds())
            logger.debug(f"Next tick at {fire_time} (in {delay:.1f}s)")
            await asyncio.sleep(delay)
            if not self._running:
                break
            self._last_fire = fire_time
            task = asyncio.create_task(self._run_tick())
            self._ticks.add(task)
            task.add_done_callback(self._ticks.discard)

    async def _run_tick(self) -> None:
        try:
            await self._tick()
        except Exception as e:
            logger.error(f"Tick failed: {e}")
