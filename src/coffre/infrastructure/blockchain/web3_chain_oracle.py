"""
Chain oracle backed by an Ethereum JSON-RPC node through web3.py.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import Web3Exception

from coffre.domain.exceptions import OracleUnavailableError
from coffre.domain.services.i_chain_oracle import (
    BalanceSnapshot,
    IChainOracle,
    NetworkInfo,
)
from coffre.infrastructure.monitoring import metrics
from coffre.infrastructure.monitoring.logger import get_logger
from coffre.infrastructure.resilience import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    Retry,
    RetryConfig,
    RetryError,
)

logger = get_logger(__name__)

CHAIN_NAMES = {
    1: "mainnet",
    11155111: "sepolia",
    17000: "holesky",
}

TRANSIENT_ERRORS = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    ConnectionError,
    Web3Exception,
)


def block_time(timestamp: Optional[int]) -> Optional[datetime]:
    """Block timestamp (unix seconds) as naive UTC."""
    if timestamp is None:
        return None
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc).replace(
        tzinfo=None
    )


class Web3ChainOracle(IChainOracle):
    """
    Balance and network queries over AsyncWeb3.

    Every RPC goes through a per-call timeout, retry with backoff and a
    circuit breaker. Any failure surfaces as OracleUnavailableError.
    """

    def __init__(
        self,
        rpc_url: str,
        network_name: str = "mainnet",
        timeout: float = 15.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
        retry: Optional[Retry] = None,
        w3: Optional[AsyncWeb3] = None,
    ):
        """
        Initialize oracle.

        Args:
            rpc_url: Ethereum JSON-RPC endpoint
            network_name: Name reported when the chain id is unknown
            timeout: Seconds allowed per RPC call
            circuit_breaker: Breaker shared by all calls
            retry: Retry policy for transient failures
            w3: Preconfigured AsyncWeb3 instance (built from rpc_url if None)
        """
        self.rpc_url = rpc_url
        self.network_name = network_name
        self.timeout = timeout
        self.circuit_breaker = circuit_breaker or CircuitBreaker("ethereum_rpc")
        self.retry = retry or Retry(RetryConfig(retry_on=TRANSIENT_ERRORS))
        self.w3 = w3 or AsyncWeb3(
            AsyncHTTPProvider(
                rpc_url,
                request_kwargs={"timeout": aiohttp.ClientTimeout(total=timeout)},
            )
        )

    async def get_balance(self, address: str) -> BalanceSnapshot:
        """Get ether balance of address at the latest block."""

        async def query() -> BalanceSnapshot:
            checksum = AsyncWeb3.to_checksum_address(address)
            block_number = await self.w3.eth.block_number
            balance = await self.w3.eth.get_balance(checksum, block_number)
            block = await self.w3.eth.get_block(block_number)
            return BalanceSnapshot(
                address=address.lower(),
                balance_wei=int(balance),
                block_number=int(block_number),
                block_timestamp=block_time(block.get("timestamp")),
            )

        return await self._guarded("get_balance", query)

    async def get_network_info(self) -> NetworkInfo:
        """Get chain id, latest block and current gas price."""

        async def query() -> NetworkInfo:
            chain_id = await self.w3.eth.chain_id
            block = await self.w3.eth.get_block("latest")
            gas_price = await self.w3.eth.gas_price
            return NetworkInfo(
                chain_id=int(chain_id),
                name=CHAIN_NAMES.get(int(chain_id), self.network_name),
                block_number=int(block["number"]),
                gas_price_wei=int(gas_price),
                block_timestamp=block_time(block.get("timestamp")),
            )

        return await self._guarded("get_network_info", query)

    async def _guarded(
        self, operation: str, query: Callable[[], Awaitable[Any]]
    ) -> Any:
        async def attempt() -> Any:
            return await asyncio.wait_for(query(), timeout=self.timeout)

        started = time.perf_counter()
        try:
            result = await self.circuit_breaker.call(self.retry.execute, attempt)
        except CircuitBreakerOpenError as e:
            metrics.oracle_requests_total.labels(
                operation=operation, status="circuit_open"
            ).inc()
            raise OracleUnavailableError(str(e))
        except RetryError as e:
            metrics.oracle_requests_total.labels(
                operation=operation, status="error"
            ).inc()
            logger.warning(f"Oracle {operation} failed: {e.last_exception}")
            raise OracleUnavailableError(
                f"Ethereum node unavailable ({operation}): {e.last_exception}"
            )
        except (KeyError, TypeError, ValueError) as e:
            metrics.oracle_requests_total.labels(
                operation=operation, status="error"
            ).inc()
            raise OracleUnavailableError(
                f"Unexpected Ethereum node response ({operation}): {e}"
            )
        finally:
            metrics.oracle_request_duration_seconds.labels(
                operation=operation
            ).observe(time.perf_counter() - started)

        metrics.oracle_requests_total.labels(
            operation=operation, status="success"
        ).inc()
        return result

    async def close(self) -> None:
        """Close the provider's HTTP session."""
        await self.w3.provider.disconnect()
