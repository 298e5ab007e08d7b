"""
Transfer simulation repository interface.

Implementations enforce unconditional retention: a record older than the
retention window is unreachable from every read, whatever its status.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from coffre.domain.entities.transfer_simulation import (
    SimulationIssue,
    SimulationResult,
    SimulationStatus,
    SimulationWarning,
    TransferSimulation,
)


class ISimulationRepository(ABC):
    """Interface for transfer simulation persistence."""

    @abstractmethod
    async def create(self, simulation: TransferSimulation) -> TransferSimulation:
        """Persist a new simulation record."""

    @abstractmethod
    async def get_by_simulation_id(
        self, simulation_id: str
    ) -> Optional[TransferSimulation]:
        """
        Get a live (non-expired) simulation.

        Args:
            simulation_id: Public simulation identifier

        Returns:
            Simulation if found and retained, None otherwise
        """

    @abstractmethod
    async def claim_pending(self, simulation_id: str) -> Optional[TransferSimulation]:
        """
        Atomically move a pending record to simulating.

        Returns:
            Claimed simulation, or None if missing, expired or not pending
        """

    @abstractmethod
    async def update_status(
        self,
        simulation_id: str,
        status: SimulationStatus,
        result: Optional[SimulationResult] = None,
        errors: Optional[List[SimulationIssue]] = None,
        warnings: Optional[List[SimulationWarning]] = None,
    ) -> TransferSimulation:
        """
        Transition status and record outcome in one write.

        Raises:
            EntityNotFoundError: If record is missing or expired
            ValueError: If the transition is not allowed
        """

    @abstractmethod
    async def append_warning(
        self, simulation_id: str, warning: SimulationWarning
    ) -> TransferSimulation:
        """
        Append a warning to a record.

        Raises:
            EntityNotFoundError: If record is missing or expired
        """

    @abstractmethod
    async def list_by_wallet(
        self,
        wallet_address: str,
        limit: int = 10,
        skip: int = 0,
        status: Optional[SimulationStatus] = None,
    ) -> List[TransferSimulation]:
        """List a wallet's live simulations, newest first."""

    @abstractmethod
    async def delete_expired(self) -> int:
        """
        Purge records past the retention window.

        Returns:
            Number of deleted records
        """

    @abstractmethod
    async def commit(self) -> None:
        """Make pending writes visible to other sessions and workers."""
