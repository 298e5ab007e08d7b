"""
Get Wallet Balance use case.

Reads the live ether balance from the chain oracle.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from coffre.domain.exceptions import ValidationError
from coffre.domain.repositories.i_user_repository import IUserRepository
from coffre.domain.services.i_chain_oracle import IChainOracle
from coffre.domain.value_objects.amount import from_smallest_unit
from coffre.domain.value_objects.wallet_address import WalletAddress
from coffre.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


@dataclass
class WalletBalanceResult:
    """Balance of one address at a block."""

    address: str
    balance: str
    balance_wei: str
    block_number: int
    block_timestamp: Optional[datetime]


class GetWalletBalance:
    """
    Use case for wallet balance lookups.

    When the address belongs to a known user, the observed balance is
    remembered in the user's wallet data.
    """

    def __init__(
        self,
        chain_oracle: IChainOracle,
        user_repository: Optional[IUserRepository] = None,
    ):
        """
        Initialize use case.

        Args:
            chain_oracle: Live chain data source
            user_repository: Repository used to cache the balance (optional)
        """
        self.chain_oracle = chain_oracle
        self.user_repository = user_repository

    async def execute(self, address: str) -> WalletBalanceResult:
        """
        Get ether balance of address.

        Args:
            address: Account address

        Returns:
            WalletBalanceResult with ether and wei amounts

        Raises:
            ValidationError: If address is malformed
            OracleUnavailableError: If the chain cannot be queried
        """
        try:
            wallet = WalletAddress(address)
        except ValueError:
            raise ValidationError(
                field="address",
                reason="Invalid Ethereum address format",
            )
        address = str(wallet)

        snapshot = await self.chain_oracle.get_balance(address)
        balance = from_smallest_unit(snapshot.balance_wei)

        if self.user_repository is not None:
            user = await self.user_repository.get_by_wallet(address)
            if user:
                user.record_balance(balance)
                await self.user_repository.update(user)

        logger.debug(f"Balance for {wallet.truncated()}: {balance} ETH")

        return WalletBalanceResult(
            address=address,
            balance=balance,
            balance_wei=str(snapshot.balance_wei),
            block_number=snapshot.block_number,
            block_timestamp=snapshot.block_timestamp,
        )
