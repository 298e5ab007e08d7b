"""
Etherscan client implementation.

HTTP client for account history lookups, hardened with Circuit Breaker,
Retry and Metrics.
"""

import asyncio
from typing import List, Optional

import aiohttp

from coffre.domain.exceptions import ExplorerUnavailableError
from coffre.domain.services.i_transaction_explorer import (
    ITransactionExplorer,
    TransactionRecord,
)
from coffre.domain.value_objects.amount import from_smallest_unit
from coffre.infrastructure.blockchain.web3_chain_oracle import block_time
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

NO_TRANSACTIONS = "No transactions found"


class EtherscanClient(ITransactionExplorer):
    """
    Etherscan account API client.

    Only the "txlist" action (normal transactions) is used.
    """

    def __init__(
        self,
        api_url: str = "https://api.etherscan.io/api",
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
        retry: Optional[Retry] = None,
    ):
        """
        Initialize Etherscan client.

        Args:
            api_url: Etherscan API endpoint
            api_key: Etherscan API key (anonymous rate limits if None)
            timeout: Total request timeout in seconds
            circuit_breaker: Optional Circuit Breaker
            retry: Optional retry policy for transport errors
        """
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.circuit_breaker = circuit_breaker or CircuitBreaker("etherscan")
        self.retry = retry or Retry(
            RetryConfig(retry_on=(aiohttp.ClientError, asyncio.TimeoutError))
        )
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def get_transactions(
        self,
        address: str,
        page: int = 1,
        offset: int = 10,
    ) -> List[TransactionRecord]:
        """
        Get normal transactions for address, newest first.

        Raises:
            ExplorerUnavailableError: If Etherscan fails or answers an error
        """
        params = {
            "module": "account",
            "action": "txlist",
            "address": address,
            "startblock": 0,
            "endblock": 99999999,
            "page": page,
            "offset": offset,
            "sort": "desc",
        }
        if self.api_key:
            params["apikey"] = self.api_key

        try:
            payload = await self.circuit_breaker.call(
                self.retry.execute, self._request_once, params
            )
        except CircuitBreakerOpenError as e:
            metrics.explorer_requests_total.labels(
                operation="txlist", status="circuit_open"
            ).inc()
            raise ExplorerUnavailableError(str(e))
        except RetryError as e:
            metrics.explorer_requests_total.labels(
                operation="txlist", status="error"
            ).inc()
            raise ExplorerUnavailableError(
                f"Etherscan unavailable: {e.last_exception}"
            )

        if payload.get("status") != "1":
            if payload.get("message") == NO_TRANSACTIONS:
                metrics.explorer_requests_total.labels(
                    operation="txlist", status="success"
                ).inc()
                return []
            metrics.explorer_requests_total.labels(
                operation="txlist", status="error"
            ).inc()
            raise ExplorerUnavailableError(
                f"Etherscan error: {payload.get('message')} ({payload.get('result')})"
            )

        metrics.explorer_requests_total.labels(
            operation="txlist", status="success"
        ).inc()
        return [self._to_record(item) for item in payload.get("result", [])]

    async def _request_once(self, params: dict) -> dict:
        """
        Single HTTP request attempt.

        Raises:
            aiohttp.ClientError: Network or server errors (will be retried)
        """
        session = await self._get_session()
        async with session.get(self.api_url, params=params) as response:
            if response.status != 200:
                error_text = await response.text()
                raise aiohttp.ClientError(
                    f"Etherscan HTTP {response.status}: {error_text[:200]}"
                )
            return await response.json(content_type=None)

    @staticmethod
    def _to_record(item: dict) -> TransactionRecord:
        """Convert an Etherscan txlist item."""
        failed = item.get("isError") == "1" or item.get("txreceipt_status") == "0"
        return TransactionRecord(
            hash=item["hash"],
            block_number=int(item["blockNumber"]),
            timestamp=block_time(int(item["timeStamp"])),
            from_address=item["from"].lower(),
            to_address=item["to"].lower() if item.get("to") else None,
            value=from_smallest_unit(item["value"]),
            value_wei=item["value"],
            gas_used=item.get("gasUsed", "0"),
            gas_price=item.get("gasPrice", "0"),
            status="failed" if failed else "success",
        )

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
