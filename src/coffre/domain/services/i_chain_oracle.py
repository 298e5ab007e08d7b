"""
Chain oracle interface.

Source of live balance and network data for the simulation engine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class BalanceSnapshot:
    """Balance of an address at a given block."""

    address: str
    balance_wei: int
    block_number: int
    block_timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class NetworkInfo:
    """Current network state, including the reference gas price."""

    chain_id: int
    name: str
    block_number: int
    gas_price_wei: int
    block_timestamp: Optional[datetime] = None


class IChainOracle(ABC):
    """Interface for chain data queries."""

    @abstractmethod
    async def get_balance(self, address: str) -> BalanceSnapshot:
        """
        Get native coin balance of an address.

        Args:
            address: Account address (any casing)

        Returns:
            BalanceSnapshot with balance in wei

        Raises:
            OracleUnavailableError: On any transport, parse or timeout failure
        """

    @abstractmethod
    async def get_network_info(self) -> NetworkInfo:
        """
        Get chain id, latest block and reference gas price.

        Raises:
            OracleUnavailableError: On any transport, parse or timeout failure
        """

    @abstractmethod
    async def close(self) -> None:
        """Release transport resources."""
