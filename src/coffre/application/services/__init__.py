"""
Application services.
"""

from coffre.application.services.session_manager import (
    ClientMetadata,
    IssuedSession,
    SessionManager,
    ValidatedSession,
)
from coffre.application.services.simulation_engine import (
    CreateSimulationCommand,
    SimulationEngine,
    SimulationPolicy,
    SimulationStats,
)

__all__ = [
    "ClientMetadata",
    "IssuedSession",
    "ValidatedSession",
    "SessionManager",
    "CreateSimulationCommand",
    "SimulationPolicy",
    "SimulationStats",
    "SimulationEngine",
]
