"""
Domain entities.
"""

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
from coffre.domain.entities.user import (
    Currency,
    SecurityInfo,
    Session,
    User,
    UserPreferences,
    UserProfile,
    WalletData,
)

__all__ = [
    "User",
    "UserProfile",
    "UserPreferences",
    "Currency",
    "SecurityInfo",
    "WalletData",
    "Session",
    "TransferSimulation",
    "TransferParameters",
    "SimulationStatus",
    "SimulationSource",
    "SimulationResult",
    "SimulationIssue",
    "SimulationWarning",
    "NetworkContext",
    "RequestMetadata",
]
