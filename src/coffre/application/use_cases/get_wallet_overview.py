"""
Get Wallet Overview use case.

Balance and latest transactions of an address in one call.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import List

from coffre.application.use_cases.get_transaction_history import (
    GetTransactionHistory,
)
from coffre.application.use_cases.get_wallet_balance import (
    GetWalletBalance,
    WalletBalanceResult,
)
from coffre.domain.clock import utcnow
from coffre.domain.exceptions import ValidationError
from coffre.domain.services.i_transaction_explorer import TransactionRecord
from coffre.domain.value_objects.wallet_address import WalletAddress

RECENT_TRANSACTIONS = 3


@dataclass
class WalletOverview:
    """Balance plus most recent transactions."""

    address: str
    balance: WalletBalanceResult
    recent_transactions: List[TransactionRecord]
    last_updated: datetime


class GetWalletOverview:
    """
    Use case for the wallet overview.

    The chain oracle and the explorer are queried concurrently; either
    failing fails the whole overview.
    """

    def __init__(
        self,
        get_wallet_balance: GetWalletBalance,
        get_transaction_history: GetTransactionHistory,
    ):
        self.get_wallet_balance = get_wallet_balance
        self.get_transaction_history = get_transaction_history

    async def execute(self, address: str) -> WalletOverview:
        """
        Get wallet overview.

        Args:
            address: Account address

        Returns:
            WalletOverview with balance and up to 3 transactions

        Raises:
            ValidationError: If address is malformed
            OracleUnavailableError: If the chain cannot be queried
            ExplorerUnavailableError: If the explorer cannot be reached
        """
        try:
            wallet = WalletAddress(address)
        except ValueError:
            raise ValidationError(
                field="address",
                reason="Invalid Ethereum address format",
            )

        balance, transactions = await asyncio.gather(
            self.get_wallet_balance.execute(str(wallet)),
            self.get_transaction_history.execute(
                str(wallet), page=1, offset=RECENT_TRANSACTIONS
            ),
        )

        return WalletOverview(
            address=str(wallet),
            balance=balance,
            recent_transactions=transactions,
            last_updated=utcnow(),
        )
