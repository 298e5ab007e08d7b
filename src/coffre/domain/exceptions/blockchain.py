"""
Blockchain data source exceptions.
"""

from coffre.domain.exceptions.base import CoffreException


class BlockchainError(CoffreException):
    """Base exception for chain data failures."""

    def __init__(self, message: str, code: str = "BLOCKCHAIN_ERROR"):
        super().__init__(message, code=code)


class OracleUnavailableError(BlockchainError):
    """Raised when the chain oracle cannot answer (transport, parse, timeout)."""

    def __init__(self, message: str):
        super().__init__(message, code="ORACLE_UNAVAILABLE")


class ExplorerUnavailableError(BlockchainError):
    """Raised when the block explorer API fails."""

    def __init__(self, message: str):
        super().__init__(message, code="EXPLORER_UNAVAILABLE")
