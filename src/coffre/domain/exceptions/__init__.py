"""
Domain exceptions package.
"""

# Auth exceptions
from coffre.domain.exceptions.auth import (
    AccountLockedError,
    AuthenticationError,
    ExpiredTokenError,
    InvalidTokenError,
    RevokedSessionError,
)

# Base exceptions
from coffre.domain.exceptions.base import (
    AccessDeniedError,
    CoffreException,
    DuplicateEntityError,
    EntityNotFoundError,
    ValidationError,
)

# Blockchain exceptions
from coffre.domain.exceptions.blockchain import (
    BlockchainError,
    ExplorerUnavailableError,
    OracleUnavailableError,
)

# Simulation exceptions
from coffre.domain.exceptions.simulation import (
    InvalidAmountError,
    InvalidTransferRequestError,
    SimulationError,
)

__all__ = [
    # Base
    "CoffreException",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "ValidationError",
    "AccessDeniedError",
    # Auth
    "AuthenticationError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "RevokedSessionError",
    "AccountLockedError",
    # Blockchain
    "BlockchainError",
    "OracleUnavailableError",
    "ExplorerUnavailableError",
    # Simulation
    "InvalidAmountError",
    "InvalidTransferRequestError",
    "SimulationError",
]
