"""
Transfer simulation engine.

Turns a transfer request into a cost and feasibility prediction. Creation
is synchronous up to the pending record; execution runs later on the
simulation executor and always ends in a terminal status.
"""

import asyncio
import time
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID, uuid4

from coffre.application.services.transfer_validator import (
    TransferRequest,
    validate_source,
    validate_transfer,
)
from coffre.domain.entities.transfer_simulation import (
    NetworkContext,
    RequestMetadata,
    SimulationIssue,
    SimulationResult,
    SimulationStatus,
    TransferSimulation,
)
from coffre.domain.exceptions import EntityNotFoundError, OracleUnavailableError
from coffre.domain.repositories.i_simulation_repository import (
    ISimulationRepository,
)
from coffre.domain.services import simulation_rules
from coffre.domain.services.i_chain_oracle import IChainOracle, NetworkInfo
from coffre.domain.services.i_simulation_executor import ISimulationExecutor
from coffre.domain.value_objects.amount import (
    from_smallest_unit,
    mean_gwei,
    wei_to_gwei,
)
from coffre.infrastructure.monitoring import metrics
from coffre.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


@dataclass
class CreateSimulationCommand:
    """Command to create a transfer simulation."""

    wallet_address: str
    from_address: str
    to_address: str
    amount: str
    user_id: Optional[UUID] = None
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    max_fee_per_gas: Optional[str] = None
    max_priority_fee_per_gas: Optional[str] = None
    source: Optional[str] = None
    session_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class SimulationPolicy:
    """Tunables for the simulation engine."""

    retention: timedelta = timedelta(hours=24)
    execution_timeout: float = 30.0
    default_gas_limit: str = "21000"
    default_gas_price_gwei: str = "20"
    chain_id: int = 1
    network_name: str = "mainnet"
    stats_window: int = 100
    max_list_limit: int = 50


@dataclass
class SimulationStats:
    """Aggregates over a wallet's retained simulations."""

    total: int
    successful: int
    failed: int
    pending: int
    simulating: int
    total_value_simulated: str
    average_gas_price: str
    last_simulation: Optional[datetime]

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "pending": self.pending,
            "simulating": self.simulating,
            "total_value_simulated": self.total_value_simulated,
            "average_gas_price": self.average_gas_price,
            "last_simulation": self.last_simulation,
        }


@dataclass
class _Outcome:
    status: SimulationStatus
    result: Optional[SimulationResult]
    errors: list
    warnings: list


class SimulationEngine:
    """
    State machine: pending -> simulating -> success | failed.

    Business rules:
    - Input is validated before anything is persisted
    - Oracle failures at creation fall back to configured defaults
    - Execution failures (timeout, oracle, unexpected) end as failed with
      a SIMULATION_ERROR; records are never left simulating
    - A record the executor refuses is failed immediately
    - Result, status, errors and warnings are written together
    """

    def __init__(
        self,
        simulation_repository: ISimulationRepository,
        chain_oracle: IChainOracle,
        executor: Optional[ISimulationExecutor] = None,
        policy: Optional[SimulationPolicy] = None,
    ):
        """
        Initialize engine with dependencies.

        Args:
            simulation_repository: Simulation store
            chain_oracle: Live balance and network data
            executor: Runs execute() off the request path (None: caller runs it)
            policy: Engine tunables
        """
        self.simulation_repository = simulation_repository
        self.chain_oracle = chain_oracle
        self.executor = executor
        self.policy = policy or SimulationPolicy()

    # ================================================================
    # Create
    # ================================================================

    async def create(self, command: CreateSimulationCommand) -> TransferSimulation:
        """
        Validate, persist a pending simulation and submit it for execution.

        Args:
            command: Transfer parameters and request metadata

        Returns:
            Pending TransferSimulation

        Raises:
            InvalidTransferRequestError: If any transfer field is invalid
        """
        # 1. Validate before touching the network or the store
        transfer = validate_transfer(
            TransferRequest(
                from_address=command.from_address,
                to_address=command.to_address,
                amount=command.amount,
                gas_limit=command.gas_limit,
                gas_price=command.gas_price,
                max_fee_per_gas=command.max_fee_per_gas,
                max_priority_fee_per_gas=command.max_priority_fee_per_gas,
            ),
            fallback_gas_price=self.policy.default_gas_price_gwei,
            default_gas_limit=self.policy.default_gas_limit,
        )
        source = validate_source(command.source)

        # 2. Snapshot network context
        network_info = await self._snapshot_network()
        if network_info is not None:
            network = NetworkContext(
                chain_id=network_info.chain_id,
                name=network_info.name,
                block_number=network_info.block_number,
                block_timestamp=network_info.block_timestamp,
            )
            if command.gas_price is None and network_info.gas_price_wei > 0:
                transfer = replace(
                    transfer,
                    gas_price=wei_to_gwei(network_info.gas_price_wei),
                    gas_price_wei=str(network_info.gas_price_wei),
                )
        else:
            network = NetworkContext(
                chain_id=self.policy.chain_id,
                name=self.policy.network_name,
            )

        # 3. Persist pending record and make it visible to workers
        simulation = TransferSimulation(
            simulation_id=f"sim_{uuid4().hex}",
            wallet_address=command.wallet_address,
            user_id=command.user_id,
            transfer=transfer,
            network=network,
            metadata=RequestMetadata(
                source=source,
                session_id=command.session_id,
                ip_address=command.ip_address,
                user_agent=command.user_agent,
            ),
        )
        created = await self.simulation_repository.create(simulation)
        await self.simulation_repository.commit()

        metrics.simulations_created_total.labels(source=source.value).inc()
        logger.info(
            "Simulation created",
            extra={
                "simulation_id": created.simulation_id,
                "wallet_address": created.wallet_address,
            },
        )

        # 4. Hand off execution
        if self.executor is not None:
            try:
                self.executor.submit(created.simulation_id)
            except RuntimeError as e:
                logger.error(
                    f"Simulation {created.simulation_id} could not be scheduled: {e}"
                )
                outcome = self._error_outcome(f"Simulation not scheduled: {e}")
                created = await self.simulation_repository.update_status(
                    created.simulation_id,
                    outcome.status,
                    errors=outcome.errors,
                )
                await self.simulation_repository.commit()

        return created

    async def _snapshot_network(self) -> Optional[NetworkInfo]:
        try:
            return await self.chain_oracle.get_network_info()
        except OracleUnavailableError as e:
            logger.warning(
                f"Network snapshot unavailable, using configured defaults: {e}"
            )
            return None

    # ================================================================
    # Execute
    # ================================================================

    async def execute(self, simulation_id: str) -> Optional[TransferSimulation]:
        """
        Run one simulation pass to a terminal status.

        Args:
            simulation_id: Public simulation identifier

        Returns:
            Completed simulation, or None if it was not pending
        """
        # 1. Claim pending record
        simulation = await self.simulation_repository.claim_pending(simulation_id)
        if simulation is None:
            logger.warning(
                "Simulation not pending, skipping execution",
                extra={"simulation_id": simulation_id},
            )
            return None
        await self.simulation_repository.commit()

        # 2. Evaluate under a bounded timeout
        started = time.perf_counter()
        try:
            outcome = await asyncio.wait_for(
                self._evaluate(simulation),
                timeout=self.policy.execution_timeout,
            )
        except asyncio.TimeoutError:
            outcome = self._error_outcome(
                f"Simulation timed out after {self.policy.execution_timeout}s"
            )
        except Exception as e:
            logger.error(
                f"Simulation {simulation_id} failed: {e}",
                exc_info=not isinstance(e, OracleUnavailableError),
            )
            outcome = self._error_outcome(str(e) or type(e).__name__)

        # 3. Single terminal write
        completed = await self.simulation_repository.update_status(
            simulation_id,
            outcome.status,
            result=outcome.result,
            errors=outcome.errors,
            warnings=outcome.warnings,
        )

        metrics.simulation_duration_seconds.observe(time.perf_counter() - started)
        metrics.simulations_completed_total.labels(status=outcome.status.value).inc()
        logger.info(
            "Simulation completed",
            extra={
                "simulation_id": simulation_id,
                "status": outcome.status.value,
                "errors": len(outcome.errors),
                "warnings": len(outcome.warnings),
            },
        )

        return completed

    async def _evaluate(self, simulation: TransferSimulation) -> _Outcome:
        transfer = simulation.transfer

        balance = await self.chain_oracle.get_balance(transfer.from_address)
        network = await self.chain_oracle.get_network_info()

        total_cost = transfer.total_cost_wei
        balance_after = balance.balance_wei - total_cost
        gas_price_wei = int(transfer.gas_price_wei)

        errors: List[SimulationIssue] = []
        funds_error = simulation_rules.check_funds(balance.balance_wei, total_cost)
        if funds_error is not None:
            errors.append(funds_error)

        result = SimulationResult(
            success=funds_error is None,
            gas_used=transfer.gas_limit,
            effective_gas_price=transfer.gas_price_wei,
            total_cost=from_smallest_unit(total_cost),
            total_cost_wei=str(total_cost),
            balance_after=from_smallest_unit(balance_after),
            balance_after_wei=str(balance_after),
            estimated_confirmation_time=simulation_rules.estimate_confirmation_time(
                gas_price_wei
            ),
        )

        return _Outcome(
            status=(
                SimulationStatus.SUCCESS if result.success else SimulationStatus.FAILED
            ),
            result=result,
            errors=errors,
            warnings=simulation_rules.collect_warnings(
                transfer, network.gas_price_wei
            ),
        )

    @staticmethod
    def _error_outcome(message: str) -> _Outcome:
        return _Outcome(
            status=SimulationStatus.FAILED,
            result=None,
            errors=[
                SimulationIssue(code=simulation_rules.SIMULATION_ERROR, message=message)
            ],
            warnings=[],
        )

    # ================================================================
    # Queries
    # ================================================================

    async def get(self, simulation_id: str) -> TransferSimulation:
        """
        Get a retained simulation.

        Raises:
            EntityNotFoundError: If absent or past retention
        """
        simulation = await self.simulation_repository.get_by_simulation_id(
            simulation_id
        )
        if simulation is None:
            raise EntityNotFoundError("TransferSimulation", simulation_id)
        return simulation

    async def list_for_wallet(
        self,
        wallet_address: str,
        limit: int = 10,
        skip: int = 0,
        status: Optional[SimulationStatus] = None,
    ) -> List[TransferSimulation]:
        """List a wallet's simulations, newest first (limit clamped)."""
        limit = max(1, min(limit, self.policy.max_list_limit))
        return await self.simulation_repository.list_by_wallet(
            wallet_address.lower(),
            limit=limit,
            skip=max(0, skip),
            status=status,
        )

    async def stats(self, wallet_address: str) -> SimulationStats:
        """Aggregate the wallet's most recent retained simulations."""
        simulations = await self.simulation_repository.list_by_wallet(
            wallet_address.lower(), limit=self.policy.stats_window
        )

        by_status = {status: 0 for status in SimulationStatus}
        for simulation in simulations:
            by_status[simulation.status] += 1

        successes = [
            s for s in simulations if s.status == SimulationStatus.SUCCESS
        ]
        total_value_wei = sum(int(s.transfer.amount_wei) for s in successes)

        return SimulationStats(
            total=len(simulations),
            successful=by_status[SimulationStatus.SUCCESS],
            failed=by_status[SimulationStatus.FAILED],
            pending=by_status[SimulationStatus.PENDING],
            simulating=by_status[SimulationStatus.SIMULATING],
            total_value_simulated=from_smallest_unit(total_value_wei),
            average_gas_price=mean_gwei(
                [int(s.transfer.gas_price_wei) for s in successes]
            ),
            last_simulation=simulations[0].created_at if simulations else None,
        )
