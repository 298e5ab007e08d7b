"""
Unit tests for SimulationExecutor and RetentionSweeper.

Usage:
    pytest tests/unit/infrastructure/test_background_tasks.py
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from coffre.infrastructure.tasks import RetentionSweeper, SimulationExecutor


class TestSimulationExecutor:
    """Unit tests for SimulationExecutor."""

    async def test_runs_submitted_ids(self):
        seen = []

        async def runner(simulation_id: str):
            seen.append(simulation_id)

        executor = SimulationExecutor(runner)
        executor.submit("sim_a")
        executor.submit("sim_b")
        await executor.drain()

        assert sorted(seen) == ["sim_a", "sim_b"]
        assert executor.pending == 0

    async def test_concurrency_is_bounded(self):
        running = 0
        peak = 0

        async def runner(simulation_id: str):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1

        executor = SimulationExecutor(runner, max_concurrency=2)
        for i in range(6):
            executor.submit(f"sim_{i}")
        await executor.drain()

        assert peak == 2

    async def test_runner_failure_is_contained(self):
        runner = AsyncMock(side_effect=[RuntimeError("crash"), None])
        executor = SimulationExecutor(runner)

        executor.submit("sim_bad")
        executor.submit("sim_good")
        await executor.drain()

        assert runner.await_count == 2

    async def test_shutdown_cancels_stragglers(self):
        async def runner(simulation_id: str):
            await asyncio.sleep(10)

        executor = SimulationExecutor(runner)
        executor.submit("sim_slow")

        await executor.shutdown(timeout=0.01)

        assert executor.pending == 0
        with pytest.raises(RuntimeError):
            executor.submit("sim_late")

    def test_rejects_zero_concurrency(self):
        with pytest.raises(ValueError):
            SimulationExecutor(AsyncMock(), max_concurrency=0)


class TestRetentionSweeper:
    """Unit tests for RetentionSweeper."""

    async def test_sweep_once(self):
        purge = AsyncMock(return_value=3)

        assert await RetentionSweeper(purge).sweep_once() == 3

    async def test_sweep_failure_is_logged(self):
        purge = AsyncMock(side_effect=RuntimeError("db down"))

        assert await RetentionSweeper(purge).sweep_once() == 0

    async def test_loop_runs_until_stopped(self):
        purge = AsyncMock(return_value=0)
        sweeper = RetentionSweeper(purge, interval_seconds=0.01)

        sweeper.start()
        await asyncio.sleep(0.05)
        await sweeper.stop()

        assert purge.await_count >= 1
        assert sweeper.is_running is False

    async def test_disabled_when_interval_zero(self):
        sweeper = RetentionSweeper(AsyncMock(), interval_seconds=0)

        sweeper.start()

        assert sweeper.is_running is False
