"""
Transaction explorer interface (block explorer history lookups).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class TransactionRecord:
    """One normal (external) transaction touching an address."""

    hash: str
    block_number: int
    timestamp: datetime
    from_address: str
    to_address: Optional[str]
    value: str
    value_wei: str
    gas_used: str
    gas_price: str
    status: str


class ITransactionExplorer(ABC):
    """Interface for transaction history queries."""

    @abstractmethod
    async def get_transactions(
        self,
        address: str,
        page: int = 1,
        offset: int = 10,
    ) -> List[TransactionRecord]:
        """
        Get transaction history for an address, newest first.

        Raises:
            ExplorerUnavailableError: If the explorer cannot be reached
        """

    @abstractmethod
    async def close(self) -> None:
        """Release transport resources."""
