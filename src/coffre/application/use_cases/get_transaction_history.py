"""
Get Transaction History use case.
"""

from typing import List

from coffre.domain.exceptions import ValidationError
from coffre.domain.services.i_transaction_explorer import (
    ITransactionExplorer,
    TransactionRecord,
)
from coffre.domain.value_objects.wallet_address import WalletAddress

MAX_PAGE_SIZE = 100


class GetTransactionHistory:
    """List normal transactions touching an address, newest first."""

    def __init__(self, transaction_explorer: ITransactionExplorer):
        self.transaction_explorer = transaction_explorer

    async def execute(
        self,
        address: str,
        page: int = 1,
        offset: int = 10,
    ) -> List[TransactionRecord]:
        """
        Get transaction history.

        Args:
            address: Account address
            page: 1-based page number
            offset: Page size (capped at 100)

        Returns:
            List of transaction records

        Raises:
            ValidationError: If address is malformed
            ExplorerUnavailableError: If the explorer cannot be reached
        """
        try:
            wallet = WalletAddress(address)
        except ValueError:
            raise ValidationError(
                field="address",
                reason="Invalid Ethereum address format",
            )

        return await self.transaction_explorer.get_transactions(
            str(wallet),
            page=max(1, page),
            offset=max(1, min(offset, MAX_PAGE_SIZE)),
        )
