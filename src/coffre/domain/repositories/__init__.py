"""
Repository interfaces.
"""

from coffre.domain.repositories.i_simulation_repository import (
    ISimulationRepository,
)
from coffre.domain.repositories.i_user_repository import IUserRepository

__all__ = ["IUserRepository", "ISimulationRepository"]
