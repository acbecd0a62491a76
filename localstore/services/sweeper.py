"""Expiry sweeper for the storage engine.

Runs as a background task that periodically removes expired records.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from localstore.core.logging import get_logger

logger = get_logger(__name__)


class ExpirySweeper:
    """Background task that evicts expired records on a fixed interval.

    The loop waits one interval before the first sweep and awaits each sweep
    before sleeping again, so sweeps from the same sweeper never overlap.
    The task holds no reference that keeps the host process alive: it is
    cancelled with the event loop on shutdown.
    """

    def __init__(self, sweep: Callable[[], Awaitable[int]], interval_ms: float):
        """Initialize expiry sweeper.

        Args:
            sweep: Async callable removing expired records, returns count removed
            interval_ms: Milliseconds between sweep runs
        """
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self._sweep = sweep
        self.interval_ms = interval_ms
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running and self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweeper background task. Requires a running event loop."""
        if self.running:
            logger.warning("Expiry sweeper already running")
            return

        self._running = True
        self._task = asyncio.get_running_loop().create_task(self._sweep_loop())
        logger.info("Expiry sweeper started", sweep_interval_ms=self.interval_ms)

    async def stop(self) -> None:
        """Stop the sweeper and wait for the task to finish."""
        self._running = False
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Expiry sweeper stopped")

    async def _sweep_loop(self) -> None:
        """Main sweep loop - runs until stopped."""
        while self._running:
            await asyncio.sleep(self.interval_ms / 1000)
            try:
                await self.run_once()
            except Exception as e:
                logger.error("Expiry sweep failed", error=str(e))

    async def run_once(self) -> int:
        """Run a single sweep and return the number of records removed."""
        removed = await self._sweep()
        if removed:
            logger.info("Expired records removed", count=removed)
        return removed
