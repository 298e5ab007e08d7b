"""
Transfer simulation repository implementation using SQLAlchemy.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from coffre.domain.clock import utcnow
from coffre.domain.entities.transfer_simulation import (
    NetworkContext,
    RequestMetadata,
    SimulationIssue,
    SimulationResult,
    SimulationSource,
    SimulationStatus,
    SimulationWarning,
    TransferParameters,
    TransferSimulation,
)
from coffre.domain.exceptions import EntityNotFoundError
from coffre.domain.repositories.i_simulation_repository import (
    ISimulationRepository,
)
from coffre.infrastructure.persistence.models import TransferSimulationModel


class SimulationRepository(ISimulationRepository):
    """
    SQLAlchemy implementation of simulation repository.

    Expiry is enforced on read: every query only sees rows created within
    the retention window. delete_expired() reclaims the space.
    """

    def __init__(
        self,
        session: AsyncSession,
        retention: timedelta = timedelta(hours=24),
    ):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
            retention: Records older than this are unreachable
        """
        self.session = session
        self.retention = retention

    def _cutoff(self) -> datetime:
        return utcnow() - self.retention

    def _live(self):
        return select(TransferSimulationModel).where(
            TransferSimulationModel.created_at > self._cutoff()
        )

    async def create(self, simulation: TransferSimulation) -> TransferSimulation:
        """
        Persist a new simulation record.

        Args:
            simulation: Simulation entity to persist

        Returns:
            Created simulation entity
        """
        transfer = simulation.transfer
        model = TransferSimulationModel(
            id=simulation.id,
            simulation_id=simulation.simulation_id,
            wallet_address=simulation.wallet_address,
            user_id=simulation.user_id,
            from_address=transfer.from_address,
            to_address=transfer.to_address,
            amount=transfer.amount,
            amount_wei=transfer.amount_wei,
            gas_limit=transfer.gas_limit,
            gas_price=transfer.gas_price,
            gas_price_wei=transfer.gas_price_wei,
            max_fee_per_gas=transfer.max_fee_per_gas,
            max_priority_fee_per_gas=transfer.max_priority_fee_per_gas,
            chain_id=simulation.network.chain_id,
            network_name=simulation.network.name,
            block_number=simulation.network.block_number,
            block_timestamp=simulation.network.block_timestamp,
            source=simulation.metadata.source.value,
            session_id=simulation.metadata.session_id,
            ip_address=simulation.metadata.ip_address,
            user_agent=simulation.metadata.user_agent,
            created_at=simulation.created_at,
        )
        self._apply_state(model, simulation)

        self.session.add(model)
        await self.session.flush()

        return self._to_entity(model)

    async def get_by_simulation_id(
        self, simulation_id: str
    ) -> Optional[TransferSimulation]:
        """
        Retrieve a retained simulation by its public ID.

        Returns:
            Simulation entity if found and not expired, None otherwise
        """
        model = await self._fetch(simulation_id)
        return self._to_entity(model) if model else None

    async def claim_pending(self, simulation_id: str) -> Optional[TransferSimulation]:
        """
        Move a pending record to simulating under a row lock.

        Returns:
            Claimed simulation, None if missing, expired or not pending
        """
        model = await self._fetch(simulation_id, for_update=True)
        if model is None or model.status != SimulationStatus.PENDING.value:
            return None

        simulation = self._to_entity(model)
        simulation.transition_to(SimulationStatus.SIMULATING)
        self._apply_state(model, simulation)
        await self.session.flush()

        return simulation

    async def update_status(
        self,
        simulation_id: str,
        status: SimulationStatus,
        result: Optional[SimulationResult] = None,
        errors: Optional[List[SimulationIssue]] = None,
        warnings: Optional[List[SimulationWarning]] = None,
    ) -> TransferSimulation:
        """
        Transition status and record outcome in a single write.

        Raises:
            EntityNotFoundError: If record is missing or expired
            ValueError: If the record is already terminal
        """
        model = await self._fetch(simulation_id, for_update=True)
        if model is None:
            raise EntityNotFoundError("TransferSimulation", simulation_id)

        simulation = self._to_entity(model)
        simulation.transition_to(
            status, result=result, errors=errors, warnings=warnings
        )
        self._apply_state(model, simulation)
        await self.session.flush()

        return simulation

    async def append_warning(
        self, simulation_id: str, warning: SimulationWarning
    ) -> TransferSimulation:
        """
        Append a warning to a retained record.

        Raises:
            EntityNotFoundError: If record is missing or expired
        """
        model = await self._fetch(simulation_id, for_update=True)
        if model is None:
            raise EntityNotFoundError("TransferSimulation", simulation_id)

        simulation = self._to_entity(model)
        simulation.add_warning(warning)
        self._apply_state(model, simulation)
        await self.session.flush()

        return simulation

    async def list_by_wallet(
        self,
        wallet_address: str,
        limit: int = 10,
        skip: int = 0,
        status: Optional[SimulationStatus] = None,
    ) -> List[TransferSimulation]:
        """
        List a wallet's retained simulations, newest first.

        Args:
            wallet_address: Owner wallet address
            limit: Maximum records
            skip: Records to skip
            status: Optional status filter

        Returns:
            List of simulation entities
        """
        stmt = self._live().where(
            TransferSimulationModel.wallet_address == wallet_address.lower()
        )

        if status:
            stmt = stmt.where(TransferSimulationModel.status == status.value)

        stmt = (
            stmt.order_by(TransferSimulationModel.created_at.desc())
            .offset(skip)
            .limit(limit)
        )

        result = await self.session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    async def delete_expired(self) -> int:
        """
        Delete records past the retention window.

        Returns:
            Number of deleted records
        """
        stmt = delete(TransferSimulationModel).where(
            TransferSimulationModel.created_at <= self._cutoff()
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def commit(self) -> None:
        await self.session.commit()

    async def _fetch(
        self, simulation_id: str, for_update: bool = False
    ) -> Optional[TransferSimulationModel]:
        stmt = self._live().where(
            TransferSimulationModel.simulation_id == simulation_id
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(
            stmt.execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _apply_state(
        model: TransferSimulationModel, simulation: TransferSimulation
    ) -> None:
        """Copy mutable lifecycle fields onto the ORM model."""
        model.status = simulation.status.value
        model.result = simulation.result.to_dict() if simulation.result else None
        model.errors = [error.to_dict() for error in simulation.errors]
        model.warnings = [warning.to_dict() for warning in simulation.warnings]
        model.executed_at = simulation.executed_at
        model.completed_at = simulation.completed_at
        model.updated_at = simulation.updated_at

    def _to_entity(self, model: TransferSimulationModel) -> TransferSimulation:
        """Convert ORM model to domain entity."""
        return TransferSimulation(
            id=model.id,
            simulation_id=model.simulation_id,
            wallet_address=model.wallet_address,
            user_id=model.user_id,
            transfer=TransferParameters(
                from_address=model.from_address,
                to_address=model.to_address,
                amount=model.amount,
                amount_wei=model.amount_wei,
                gas_limit=model.gas_limit,
                gas_price=model.gas_price,
                gas_price_wei=model.gas_price_wei,
                max_fee_per_gas=model.max_fee_per_gas,
                max_priority_fee_per_gas=model.max_priority_fee_per_gas,
            ),
            network=NetworkContext(
                chain_id=model.chain_id,
                name=model.network_name,
                block_number=model.block_number,
                block_timestamp=model.block_timestamp,
            ),
            metadata=RequestMetadata(
                source=SimulationSource(model.source),
                session_id=model.session_id,
                ip_address=model.ip_address,
                user_agent=model.user_agent,
            ),
            status=SimulationStatus(model.status),
            result=SimulationResult.from_dict(model.result) if model.result else None,
            errors=[SimulationIssue.from_dict(e) for e in model.errors or []],
            warnings=[SimulationWarning.from_dict(w) for w in model.warnings or []],
            executed_at=model.executed_at,
            completed_at=model.completed_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
