"""
Unit tests for EtherscanClient.

The HTTP attempt is replaced so no request leaves the process.

Usage:
    pytest tests/unit/infrastructure/test_etherscan_client.py
"""

from unittest.mock import AsyncMock

import aiohttp
import pytest

from coffre.domain.exceptions import ExplorerUnavailableError
from coffre.infrastructure.blockchain.etherscan_client import EtherscanClient
from coffre.infrastructure.resilience import Retry, RetryConfig

ADDRESS = "0x742d35cc6634c0532925a3b844bc454e4438f44e"

TX = {
    "hash": "0xabc",
    "blockNumber": "19000000",
    "timeStamp": "1700000000",
    "from": "0x742D35CC6634C0532925A3B844BC454E4438F44E",
    "to": "0x8ba1f109551bd432803012645ac136ddd64dba72",
    "value": "1500000000000000000",
    "gasUsed": "21000",
    "gasPrice": "20000000000",
    "isError": "0",
    "txreceipt_status": "1",
}


def make_client(responses) -> EtherscanClient:
    client = EtherscanClient(
        api_key="key",
        retry=Retry(
            RetryConfig(
                max_attempts=2,
                initial_delay=0.0,
                jitter_factor=0.0,
                retry_on=(aiohttp.ClientError,),
            )
        ),
    )
    client._request_once = AsyncMock(side_effect=responses)
    return client


class TestEtherscanClient:
    """Unit tests for EtherscanClient."""

    async def test_parses_transactions(self):
        client = make_client([{"status": "1", "message": "OK", "result": [TX]}])

        [record] = await client.get_transactions(ADDRESS, page=2, offset=5)

        assert record.hash == "0xabc"
        assert record.from_address == TX["from"].lower()
        assert record.value == "1.5"
        assert record.status == "success"
        params = client._request_once.await_args.args[0]
        assert params["action"] == "txlist"
        assert params["sort"] == "desc"
        assert params["page"] == 2
        assert params["offset"] == 5
        assert params["apikey"] == "key"

    @pytest.mark.parametrize(
        "flags", [{"isError": "1"}, {"txreceipt_status": "0"}]
    )
    def test_failed_status(self, flags):
        record = EtherscanClient._to_record({**TX, **flags})

        assert record.status == "failed"

    def test_contract_creation_has_no_recipient(self):
        record = EtherscanClient._to_record({**TX, "to": ""})

        assert record.to_address is None

    async def test_no_transactions_is_empty(self):
        client = make_client(
            [{"status": "0", "message": "No transactions found", "result": []}]
        )

        assert await client.get_transactions(ADDRESS) == []

    async def test_api_error(self):
        client = make_client(
            [{"status": "0", "message": "NOTOK", "result": "Invalid API Key"}]
        )

        with pytest.raises(ExplorerUnavailableError) as exc_info:
            await client.get_transactions(ADDRESS)
        assert "Invalid API Key" in exc_info.value.message

    async def test_transport_error_retried_then_raised(self):
        client = make_client(aiohttp.ClientError("boom"))

        with pytest.raises(ExplorerUnavailableError):
            await client.get_transactions(ADDRESS)
        assert client._request_once.await_count == 2
