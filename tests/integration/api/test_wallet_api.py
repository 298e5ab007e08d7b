"""
Integration tests for wallet routes.

Usage:
    pytest tests/integration/api/test_wallet_api.py
"""

from datetime import datetime

from coffre.domain.services.i_transaction_explorer import TransactionRecord
from tests.integration.api.conftest import ALICE, BOB


def make_record(index: int) -> TransactionRecord:
    return TransactionRecord(
        hash=f"0x{index:064x}",
        block_number=19_000_000 - index,
        timestamp=datetime(2024, 1, 1, 12, 0, index),
        from_address=ALICE,
        to_address=BOB,
        value="0.1",
        value_wei="100000000000000000",
        gas_used="21000",
        gas_price="20000000000",
        status="success",
    )


class TestWalletBalance:
    """GET /api/wallet/balance."""

    async def test_defaults_to_caller_and_caches_balance(self, api):
        headers = await api.login()

        response = await api.client.get("/api/wallet/balance", headers=headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["address"] == ALICE
        assert data["balance"] == "10.0"
        assert data["balance_wei"] == str(10 * 10**18)
        assert data["block_number"] == 19_000_000

        me = await api.client.get("/api/users/me", headers=headers)
        assert me.json()["data"]["wallet_data"]["last_balance"] == "10.0"

    async def test_other_address(self, api):
        headers = await api.login()

        response = await api.client.get(
            "/api/wallet/balance", headers=headers, params={"address": BOB}
        )

        assert response.status_code == 200
        assert response.json()["data"]["address"] == BOB
        assert api.oracle.balance_calls == [BOB]

    async def test_malformed_address(self, api):
        headers = await api.login()

        response = await api.client.get(
            "/api/wallet/balance", headers=headers, params={"address": "0xabc"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    async def test_oracle_unavailable(self, api):
        headers = await api.login()
        api.oracle.available = False

        response = await api.client.get("/api/wallet/balance", headers=headers)

        assert response.status_code == 503
        assert response.json()["error"] == "ORACLE_UNAVAILABLE"


class TestTransactionHistory:
    """GET /api/wallet/transactions."""

    async def test_paged_history(self, api):
        api.explorer.records = [make_record(i) for i in range(5)]
        headers = await api.login()

        response = await api.client.get(
            "/api/wallet/transactions",
            headers=headers,
            params={"page": 2, "offset": 2},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["address"] == ALICE
        assert data["page"] == 2
        assert [tx["block_number"] for tx in data["transactions"]] == [
            18_999_998,
            18_999_997,
        ]

    async def test_offset_out_of_range(self, api):
        headers = await api.login()

        response = await api.client.get(
            "/api/wallet/transactions", headers=headers, params={"offset": 101}
        )

        assert response.status_code == 400


class TestWalletOverview:
    """GET /api/wallet/overview."""

    async def test_balance_and_three_latest_transactions(self, api):
        api.explorer.records = [make_record(i) for i in range(5)]
        headers = await api.login()

        response = await api.client.get("/api/wallet/overview", headers=headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["address"] == ALICE
        assert data["balance"]["balance"] == "10.0"
        assert [tx["block_number"] for tx in data["recent_transactions"]] == [
            19_000_000,
            18_999_999,
            18_999_998,
        ]
        assert data["last_updated"] is not None

    async def test_malformed_address(self, api):
        headers = await api.login()

        response = await api.client.get(
            "/api/wallet/overview", headers=headers, params={"address": "0xabc"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
