"""
SQLAlchemy repository implementations.
"""

from coffre.infrastructure.persistence.repositories.simulation_repository import (
    SimulationRepository,
)
from coffre.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)

__all__ = ["UserRepository", "SimulationRepository"]
