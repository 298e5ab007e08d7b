"""
Retention sweeper - periodically purges expired simulation records.

Reads already ignore expired rows; the sweep only reclaims storage.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from coffre.infrastructure.monitoring import metrics
from coffre.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


class RetentionSweeper:
    """Background loop calling a purge coroutine on a fixed interval."""

    def __init__(
        self,
        purge: Callable[[], Awaitable[int]],
        interval_seconds: float = 300.0,
    ):
        """
        Initialize sweeper.

        Args:
            purge: Deletes expired records, returning how many
            interval_seconds: Pause between sweeps (0 disables the loop)
        """
        self.purge = purge
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def enabled(self) -> bool:
        return self.interval_seconds > 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self.enabled:
            logger.info("Retention sweeper disabled")
            return
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop(), name="retention-sweeper")

    async def sweep_once(self) -> int:
        """Run one purge; failures are logged and reported as 0."""
        try:
            deleted = await self.purge()
        except Exception:
            logger.exception("Retention sweep failed")
            return 0

        if deleted:
            metrics.simulations_purged_total.inc(deleted)
            logger.info(f"Purged {deleted} expired simulations")
        return deleted

    async def _loop(self) -> None:
        logger.info(f"Retention sweeper started (interval: {self.interval_seconds}s)")
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.sweep_once()

    async def stop(self) -> None:
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Retention sweeper stopped")
