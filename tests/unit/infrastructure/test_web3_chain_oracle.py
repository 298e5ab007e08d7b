"""
Unit tests for Web3ChainOracle.

Uses a stand-in for AsyncWeb3 so no node is contacted.

Usage:
    pytest tests/unit/infrastructure/test_web3_chain_oracle.py
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from coffre.domain.exceptions import OracleUnavailableError
from coffre.infrastructure.blockchain.web3_chain_oracle import (
    TRANSIENT_ERRORS,
    Web3ChainOracle,
    block_time,
)
from coffre.infrastructure.resilience import (
    CircuitBreaker,
    CircuitBreakerConfig,
    Retry,
    RetryConfig,
)

ADDRESS = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
BLOCK_TIMESTAMP = 1_700_000_000


async def value(result):
    return result


class FakeEth:
    """Mimics the awaitable properties and methods of AsyncWeb3.eth."""

    def __init__(self, balance: int = 3 * 10**18, chain_id: int = 1):
        self._chain_id = chain_id
        self.get_balance = AsyncMock(return_value=balance)
        self.get_block = AsyncMock(
            return_value={"number": 19_000_000, "timestamp": BLOCK_TIMESTAMP}
        )
        self.block_number_failures = 0

    @property
    def block_number(self):
        if self.block_number_failures:
            self.block_number_failures -= 1
            return self._raise(aiohttp.ClientConnectionError("reset"))
        return value(19_000_000)

    @property
    def chain_id(self):
        return value(self._chain_id)

    @property
    def gas_price(self):
        return value(25 * 10**9)

    @staticmethod
    async def _raise(error):
        raise error


def make_oracle(eth: FakeEth, max_attempts: int = 3, failure_threshold: int = 5):
    w3 = MagicMock()
    w3.eth = eth
    w3.provider.disconnect = AsyncMock()
    return Web3ChainOracle(
        rpc_url="http://localhost:8545",
        timeout=1.0,
        circuit_breaker=CircuitBreaker(
            "test_rpc", CircuitBreakerConfig(failure_threshold=failure_threshold)
        ),
        retry=Retry(
            RetryConfig(
                max_attempts=max_attempts,
                initial_delay=0.0,
                jitter_factor=0.0,
                retry_on=TRANSIENT_ERRORS,
            )
        ),
        w3=w3,
    )


class TestWeb3ChainOracle:
    """Unit tests for Web3ChainOracle."""

    async def test_get_balance(self):
        eth = FakeEth(balance=3 * 10**18)

        snapshot = await make_oracle(eth).get_balance(ADDRESS)

        assert snapshot.balance_wei == 3 * 10**18
        assert snapshot.block_number == 19_000_000
        assert snapshot.block_timestamp == block_time(BLOCK_TIMESTAMP)
        checksum_arg = eth.get_balance.await_args.args[0]
        assert checksum_arg.lower() == ADDRESS
        assert checksum_arg != ADDRESS

    async def test_get_network_info(self):
        info = await make_oracle(FakeEth(chain_id=11155111)).get_network_info()

        assert info.chain_id == 11155111
        assert info.name == "sepolia"
        assert info.gas_price_wei == 25 * 10**9
        assert info.block_number == 19_000_000

    async def test_unknown_chain_uses_configured_name(self):
        info = await make_oracle(FakeEth(chain_id=31337)).get_network_info()

        assert info.name == "mainnet"

    async def test_transient_failure_is_retried(self):
        eth = FakeEth()
        eth.block_number_failures = 2

        snapshot = await make_oracle(eth, max_attempts=3).get_balance(ADDRESS)

        assert snapshot.block_number == 19_000_000

    async def test_exhausted_retries_raise_oracle_unavailable(self):
        eth = FakeEth()
        eth.block_number_failures = 10

        with pytest.raises(OracleUnavailableError) as exc_info:
            await make_oracle(eth, max_attempts=2).get_balance(ADDRESS)
        assert exc_info.value.code == "ORACLE_UNAVAILABLE"

    async def test_timeout_raises_oracle_unavailable(self):
        eth = FakeEth()

        async def hang(*_):
            await asyncio.sleep(5)

        eth.get_balance = AsyncMock(side_effect=hang)
        oracle = make_oracle(eth, max_attempts=1)
        oracle.timeout = 0.01

        with pytest.raises(OracleUnavailableError):
            await oracle.get_balance(ADDRESS)

    async def test_malformed_response(self):
        eth = FakeEth()
        eth.get_block = AsyncMock(return_value={"timestamp": BLOCK_TIMESTAMP})

        with pytest.raises(OracleUnavailableError):
            await make_oracle(eth).get_network_info()

    async def test_open_circuit_short_circuits(self):
        eth = FakeEth()
        eth.block_number_failures = 100
        oracle = make_oracle(eth, max_attempts=1, failure_threshold=1)

        with pytest.raises(OracleUnavailableError):
            await oracle.get_balance(ADDRESS)
        with pytest.raises(OracleUnavailableError) as exc_info:
            await oracle.get_balance(ADDRESS)

        assert "open" in exc_info.value.message.lower()

    async def test_close_disconnects_provider(self):
        oracle = make_oracle(FakeEth())

        await oracle.close()

        oracle.w3.provider.disconnect.assert_awaited_once()
