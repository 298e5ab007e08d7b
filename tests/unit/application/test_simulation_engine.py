"""
Unit tests for SimulationEngine.

Usage:
    pytest tests/unit/application/test_simulation_engine.py
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from coffre.application.services.simulation_engine import (
    CreateSimulationCommand,
    SimulationEngine,
    SimulationPolicy,
)
from coffre.domain.clock import utcnow
from coffre.domain.entities.transfer_simulation import SimulationStatus
from coffre.domain.exceptions import EntityNotFoundError, InvalidTransferRequestError
from tests.helpers.fakes import (
    ETHER,
    GWEI,
    FakeChainOracle,
    InMemorySimulationRepository,
)

SENDER = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
RECIPIENT = "0x8ba1f109551bd432803012645ac136ddd64dba72"


def command(**overrides) -> CreateSimulationCommand:
    fields = {
        "wallet_address": SENDER,
        "from_address": SENDER,
        "to_address": RECIPIENT,
        "amount": "1.0",
    }
    fields.update(overrides)
    return CreateSimulationCommand(**fields)


class TestSimulationEngine:
    """Unit tests for SimulationEngine."""

    # ================================================================
    # Helper Methods
    # ================================================================

    def _engine(self, oracle=None, executor=None, **policy):
        repository = InMemorySimulationRepository()
        engine = SimulationEngine(
            simulation_repository=repository,
            chain_oracle=oracle or FakeChainOracle(),
            executor=executor,
            policy=SimulationPolicy(**policy),
        )
        return engine, repository

    async def _run(self, engine, **overrides):
        created = await engine.create(command(**overrides))
        return await engine.execute(created.simulation_id)

    # ================================================================
    # Create
    # ================================================================

    async def test_create_persists_pending_and_submits(self):
        executor = MagicMock()
        engine, repository = self._engine(executor=executor)

        simulation = await engine.create(command(source="web", ip_address="1.2.3.4"))

        assert simulation.status == SimulationStatus.PENDING
        assert simulation.simulation_id.startswith("sim_")
        assert simulation.metadata.ip_address == "1.2.3.4"
        assert simulation.network.block_number == 19_000_000
        assert repository.commits == 1
        executor.submit.assert_called_once_with(simulation.simulation_id)

    async def test_create_uses_network_gas_price_when_omitted(self):
        engine, _ = self._engine(oracle=FakeChainOracle(gas_price_wei=35 * GWEI))

        simulation = await engine.create(command())

        assert simulation.transfer.gas_price_wei == str(35 * GWEI)
        assert simulation.transfer.gas_price == "35.0"

    async def test_create_keeps_caller_gas_price(self):
        engine, _ = self._engine(oracle=FakeChainOracle(gas_price_wei=35 * GWEI))

        simulation = await engine.create(command(gas_price="25"))

        assert simulation.transfer.gas_price_wei == str(25 * GWEI)

    async def test_create_with_oracle_down_uses_defaults(self):
        oracle = FakeChainOracle()
        oracle.available = False
        engine, _ = self._engine(
            oracle=oracle, chain_id=11155111, network_name="sepolia"
        )

        simulation = await engine.create(command())

        assert simulation.status == SimulationStatus.PENDING
        assert simulation.transfer.gas_price_wei == str(20 * GWEI)
        assert simulation.network.chain_id == 11155111
        assert simulation.network.block_number is None

    async def test_create_rejects_invalid_request_before_persisting(self):
        executor = MagicMock()
        engine, repository = self._engine(executor=executor)

        with pytest.raises(InvalidTransferRequestError):
            await engine.create(command(amount="-3"))

        assert repository.records == {}
        executor.submit.assert_not_called()

    async def test_create_fails_record_when_executor_refuses(self):
        executor = MagicMock()
        executor.submit.side_effect = RuntimeError("Simulation executor is shut down")
        engine, repository = self._engine(executor=executor)

        simulation = await engine.create(command())

        assert simulation.status == SimulationStatus.FAILED
        assert [e.code for e in simulation.errors] == ["SIMULATION_ERROR"]
        assert repository.records[simulation.simulation_id].status == (
            SimulationStatus.FAILED
        )
        assert repository.commits == 2

    # ================================================================
    # Execute
    # ================================================================

    async def test_successful_simulation(self):
        engine, _ = self._engine(oracle=FakeChainOracle(balance_wei=2 * ETHER))

        completed = await self._run(engine, gas_price="20")

        assert completed.status == SimulationStatus.SUCCESS
        assert completed.errors == []
        assert completed.warnings == []
        assert completed.result.gas_used == "21000"
        assert completed.result.total_cost == "1.00042"
        assert completed.result.balance_after == "0.99958"
        assert completed.result.estimated_confirmation_time == 120
        assert completed.executed_at is not None
        assert completed.completed_at is not None

    async def test_insufficient_funds(self):
        engine, _ = self._engine(oracle=FakeChainOracle(balance_wei=ETHER // 2))

        completed = await self._run(engine, gas_price="20")

        assert completed.status == SimulationStatus.FAILED
        assert completed.result.success is False
        assert completed.result.balance_after.startswith("-")
        [error] = completed.errors
        assert error.code == "INSUFFICIENT_FUNDS"
        assert error.details["shortfall"] == "0.50042"

    async def test_self_transfer_and_low_gas_warnings(self):
        engine, _ = self._engine(oracle=FakeChainOracle(gas_price_wei=40 * GWEI))

        completed = await self._run(engine, to_address=SENDER, gas_price="10")

        assert completed.status == SimulationStatus.SUCCESS
        assert [w.type for w in completed.warnings] == [
            "LOW_GAS_PRICE",
            "SELF_TRANSFER",
        ]
        assert completed.warnings[0].details["deviation_percent"] == "75.0"

    async def test_self_transfer_warned_even_when_funds_insufficient(self):
        engine, _ = self._engine(oracle=FakeChainOracle(balance_wei=ETHER // 2))

        completed = await self._run(engine, to_address=SENDER)

        assert completed.status == SimulationStatus.FAILED
        assert [e.code for e in completed.errors] == ["INSUFFICIENT_FUNDS"]
        assert [w.type for w in completed.warnings] == ["SELF_TRANSFER"]

    async def test_oracle_timeout_marks_failed(self):
        oracle = FakeChainOracle()
        engine, _ = self._engine(oracle=oracle, execution_timeout=0.05)
        created = await engine.create(command())
        oracle.delay = 1.0

        completed = await engine.execute(created.simulation_id)

        assert completed.status == SimulationStatus.FAILED
        assert completed.result is None
        assert [e.code for e in completed.errors] == ["SIMULATION_ERROR"]

    async def test_oracle_outage_during_execution_marks_failed(self):
        oracle = FakeChainOracle()
        engine, _ = self._engine(oracle=oracle)
        created = await engine.create(command())
        oracle.available = False

        completed = await engine.execute(created.simulation_id)

        assert completed.status == SimulationStatus.FAILED
        assert completed.errors[0].code == "SIMULATION_ERROR"
        assert "unreachable" in completed.errors[0].message

    async def test_execute_twice_is_noop(self):
        engine, _ = self._engine()
        created = await engine.create(command())

        assert await engine.execute(created.simulation_id) is not None
        assert await engine.execute(created.simulation_id) is None

    async def test_execute_unknown_id(self):
        engine, _ = self._engine()

        assert await engine.execute("sim_missing") is None

    # ================================================================
    # Queries
    # ================================================================

    async def test_get_unknown_raises(self):
        engine, _ = self._engine()

        with pytest.raises(EntityNotFoundError):
            await engine.get("sim_missing")

    async def test_get_expired_raises(self):
        engine, repository = self._engine()
        created = await engine.create(command())
        repository.records[created.simulation_id].created_at = utcnow() - timedelta(
            hours=24, seconds=1
        )

        with pytest.raises(EntityNotFoundError):
            await engine.get(created.simulation_id)

    async def test_list_clamps_limit(self):
        engine, repository = self._engine(max_list_limit=3)
        for _ in range(5):
            await engine.create(command())

        listed = await engine.list_for_wallet(SENDER.upper().replace("0X", "0x"), 100)

        assert len(listed) == 3
        assert listed[0].created_at >= listed[-1].created_at

    async def test_list_filters_by_status(self):
        engine, _ = self._engine()
        first = await engine.create(command())
        await engine.create(command())
        await engine.execute(first.simulation_id)

        listed = await engine.list_for_wallet(SENDER, status=SimulationStatus.PENDING)

        assert len(listed) == 1

    async def test_stats(self):
        engine, _ = self._engine(oracle=FakeChainOracle(balance_wei=100 * ETHER))
        for amount, gas_price in (("0.1", "10"), ("0.2", "20"), ("0.3", "30")):
            await self._run(engine, amount=amount, gas_price=gas_price)
        await engine.create(command(amount="5"))

        stats = await engine.stats(SENDER)

        assert stats.total == 4
        assert stats.successful == 3
        assert stats.pending == 1
        assert stats.failed == 0
        assert stats.total_value_simulated == "0.6"
        assert stats.average_gas_price == "20.00"
        assert stats.last_simulation is not None

    async def test_stats_empty(self):
        engine, _ = self._engine()

        stats = await engine.stats(SENDER)

        assert stats.total == 0
        assert stats.total_value_simulated == "0.0"
        assert stats.average_gas_price == "0.00"
        assert stats.last_simulation is None
