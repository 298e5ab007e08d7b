"""
API test fixtures.

The ASGI transport does not run the application lifespan, so the
container is initialized here with fake chain collaborators.
"""

from dataclasses import dataclass

import httpx
import pytest_asyncio

from coffre.config.settings import Settings
from coffre.di.container import DIContainer, get_container
from coffre.infrastructure.persistence import Base
from coffre.main import create_app
from tests.helpers.fakes import FakeChainOracle, FakeTransactionExplorer

ALICE = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
BOB = "0x8ba1f109551bd432803012645ac136ddd64dba72"


@dataclass
class ApiHarness:
    client: httpx.AsyncClient
    container: DIContainer
    oracle: FakeChainOracle
    explorer: FakeTransactionExplorer

    async def login(self, wallet: str = ALICE) -> dict:
        """Log in and return Authorization headers."""
        response = await self.client.post(
            "/api/auth/login", json={"wallet_address": wallet}
        )
        assert response.status_code == 200
        token = response.json()["data"]["access_token"]
        return {"Authorization": f"Bearer {token}"}


async def build_harness(settings: Settings):
    container = get_container()
    await container.initialize()
    await container.database.create_tables(Base.metadata)

    oracle = FakeChainOracle()
    explorer = FakeTransactionExplorer()
    container._chain_oracle = oracle
    container._transaction_explorer = explorer

    client = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=create_app(settings)),
        base_url="http://test",
    )
    return ApiHarness(client, container, oracle, explorer)


@pytest_asyncio.fixture
async def api(settings: Settings):
    """HTTP client bound to a freshly initialized application."""
    harness = await build_harness(settings)

    yield harness

    await harness.client.aclose()
    await harness.container.shutdown()
