"""
Simulation executor - bounded asyncio task pool.

Runs simulation executions off the request path. Each submitted id gets
its own task; a semaphore caps how many run at once.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Set

from coffre.domain.services.i_simulation_executor import ISimulationExecutor
from coffre.infrastructure.monitoring import metrics
from coffre.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)

SimulationRunner = Callable[[str], Awaitable[object]]


class SimulationExecutor(ISimulationExecutor):
    """
    Task pool for simulation executions.

    Failures inside a run are logged and never propagate to the submitter.
    """

    def __init__(self, runner: SimulationRunner, max_concurrency: int = 4):
        """
        Initialize executor.

        Args:
            runner: Coroutine function executing one simulation by id
            max_concurrency: Runs allowed in parallel
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.runner = runner
        self.max_concurrency = max_concurrency
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending(self) -> int:
        """Submitted runs not finished yet."""
        return len(self._tasks)

    def submit(self, simulation_id: str) -> None:
        """
        Schedule a simulation run on the running event loop.

        Raises:
            RuntimeError: If the executor was shut down
        """
        if self._closed:
            raise RuntimeError("Simulation executor is shut down")

        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)

        task = asyncio.create_task(
            self._run(simulation_id), name=f"simulation:{simulation_id}"
        )
        self._tasks.add(task)
        metrics.simulation_queue_depth.inc()
        task.add_done_callback(self._on_done)

    async def _run(self, simulation_id: str) -> None:
        async with self._semaphore:
            try:
                await self.runner(simulation_id)
            except asyncio.CancelledError:
                logger.warning(f"Simulation {simulation_id} cancelled")
                raise
            except Exception:
                logger.exception(f"Simulation {simulation_id} run crashed")

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        metrics.simulation_queue_depth.dec()

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait until every submitted run has finished."""
        while self._tasks:
            done, _ = await asyncio.wait(set(self._tasks), timeout=timeout)
            if timeout is not None and not done:
                logger.warning(f"Drain timed out with {len(self._tasks)} runs left")
                return

    async def shutdown(self, timeout: float = 10.0) -> None:
        """
        Stop accepting work, wait for in-flight runs, cancel stragglers.

        Args:
            timeout: Seconds to wait before cancelling remaining runs
        """
        self._closed = True
        if not self._tasks:
            return

        logger.info(f"Waiting for {len(self._tasks)} simulation runs")
        _, still_running = await asyncio.wait(set(self._tasks), timeout=timeout)

        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning(f"Cancelled {len(still_running)} simulation runs")
