"""
Test fixtures and configuration.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio

from coffre.config.settings import Settings, override_settings, reset_settings
from coffre.di.container import reset_container
from coffre.infrastructure.persistence import Base, Database


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Test settings backed by a throwaway SQLite file."""
    test_settings = Settings(
        ENV="test",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'coffre_test.db'}",
        JWT_SECRET_KEY="test-secret-key",
        ETHEREUM_RPC_URL="http://localhost:8545",
        LOG_LEVEL="WARNING",
        RATE_LIMIT_ENABLED=False,
        SIMULATION_SWEEP_INTERVAL_SECONDS=0,
        SIMULATION_EXECUTION_TIMEOUT=5.0,
        RETRY_MAX_ATTEMPTS=1,
    )
    override_settings(test_settings)
    reset_container()

    yield test_settings

    reset_container()
    reset_settings()


@pytest_asyncio.fixture
async def test_db(settings: Settings) -> AsyncGenerator[Database, None]:
    """
    Create test database and tables.

    Each test gets a clean database file.
    """
    db = Database(database_url=settings.DATABASE_URL)
    await db.connect()
    await db.create_tables(Base.metadata)

    yield db

    await db.disconnect()


@pytest_asyncio.fixture
async def db_session(test_db: Database):
    """Session committing on success, rolling back on error."""
    async with test_db.session() as session:
        yield session
