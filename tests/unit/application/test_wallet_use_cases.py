"""
Unit tests for wallet balance and transaction history use cases.

Usage:
    pytest tests/unit/application/test_wallet_use_cases.py
"""

from unittest.mock import AsyncMock

import pytest

from coffre.application.use_cases.get_transaction_history import (
    GetTransactionHistory,
)
from coffre.application.use_cases.get_wallet_balance import GetWalletBalance
from coffre.application.use_cases.get_wallet_overview import GetWalletOverview
from coffre.domain.entities.user import User
from coffre.domain.exceptions import OracleUnavailableError, ValidationError
from tests.helpers.fakes import ETHER, FakeChainOracle, InMemoryUserRepository

WALLET = "0x742d35cc6634c0532925a3b844bc454e4438f44e"


class TestGetWalletBalance:
    async def test_returns_ether_and_wei(self):
        oracle = FakeChainOracle(balance_wei=ETHER + ETHER // 4)

        checksum = WALLET.upper().replace("0X", "0x")

        result = await GetWalletBalance(oracle).execute(checksum)

        assert result.address == WALLET
        assert result.balance == "1.25"
        assert result.balance_wei == str(ETHER + ETHER // 4)
        assert result.block_number == 19_000_000

    async def test_caches_balance_for_known_user(self):
        repository = InMemoryUserRepository()
        user = await repository.create(User(wallet_address=WALLET))

        use_case = GetWalletBalance(FakeChainOracle(balance_wei=ETHER), repository)

        await use_case.execute(WALLET)

        wallet_data = repository.users[user.id].wallet_data
        assert wallet_data.last_balance == "1.0"
        assert wallet_data.last_balance_update is not None

    async def test_invalid_address(self):
        with pytest.raises(ValidationError):
            await GetWalletBalance(FakeChainOracle()).execute("0x12")

    async def test_oracle_outage_propagates(self):
        oracle = FakeChainOracle()
        oracle.available = False

        with pytest.raises(OracleUnavailableError):
            await GetWalletBalance(oracle).execute(WALLET)


class TestGetTransactionHistory:
    async def test_clamps_paging(self):
        explorer = AsyncMock()
        explorer.get_transactions.return_value = []

        await GetTransactionHistory(explorer).execute(WALLET, page=0, offset=500)

        explorer.get_transactions.assert_awaited_once_with(WALLET, page=1, offset=100)

    async def test_invalid_address(self):
        with pytest.raises(ValidationError):
            await GetTransactionHistory(AsyncMock()).execute("bad")


class TestGetWalletOverview:
    def _use_case(self, oracle, explorer):
        return GetWalletOverview(
            GetWalletBalance(oracle), GetTransactionHistory(explorer)
        )

    async def test_combines_balance_and_recent_transactions(self):
        explorer = AsyncMock()
        explorer.get_transactions.return_value = ["tx1", "tx2", "tx3"]
        use_case = self._use_case(FakeChainOracle(balance_wei=ETHER), explorer)

        overview = await use_case.execute(WALLET.upper().replace("0X", "0x"))

        assert overview.address == WALLET
        assert overview.balance.balance == "1.0"
        assert overview.recent_transactions == ["tx1", "tx2", "tx3"]
        assert overview.last_updated is not None
        explorer.get_transactions.assert_awaited_once_with(WALLET, page=1, offset=3)

    async def test_invalid_address_queries_nothing(self):
        oracle = FakeChainOracle()
        explorer = AsyncMock()

        with pytest.raises(ValidationError):
            await self._use_case(oracle, explorer).execute("0x12")

        assert oracle.balance_calls == []
        explorer.get_transactions.assert_not_called()

    async def test_oracle_outage_fails_overview(self):
        oracle = FakeChainOracle()
        oracle.available = False
        explorer = AsyncMock()
        explorer.get_transactions.return_value = []

        with pytest.raises(OracleUnavailableError):
            await self._use_case(oracle, explorer).execute(WALLET)
