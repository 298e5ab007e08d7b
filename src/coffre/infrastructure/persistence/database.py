"""
Database engine and transactional sessions.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import MetaData, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from coffre.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


class Database:
    """
    Async SQLAlchemy engine owner.

    PostgreSQL (asyncpg) in deployments, SQLite (aiosqlite) in tests. One
    instance lives in the DI container; sessions are short-lived and each
    one is a single transaction.
    """

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_size: int = 20,
        max_overflow: int = 10,
        pool_recycle: int = 3600,
    ):
        """
        Args:
            database_url: SQLAlchemy async URL
            echo: Log emitted SQL
            pool_size: Persistent connections (PostgreSQL only)
            max_overflow: Extra connections under load (PostgreSQL only)
            pool_recycle: Connection lifetime in seconds (PostgreSQL only)
        """
        self.database_url = database_url
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_recycle = pool_recycle
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._engine

    def _engine_options(self) -> dict[str, Any]:
        if self.is_sqlite:
            return {"echo": self.echo}
        return {
            "echo": self.echo,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_recycle": self.pool_recycle,
            "pool_pre_ping": True,
            "connect_args": {"server_settings": {"application_name": "coffre"}},
        }

    async def connect(self) -> None:
        """Create the engine and session factory (idempotent)."""
        if self._engine is not None:
            return

        self._engine = create_async_engine(self.database_url, **self._engine_options())
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(f"Database engine ready ({self._engine.dialect.name})")

    async def disconnect(self) -> None:
        """Dispose the engine and its pooled connections."""
        if self._engine is None:
            return

        await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Transactional session scope.

        Commits when the block exits normally, rolls back and re-raises
        otherwise.

        Usage:
            async with database.session() as session:
                repository = SimulationRepository(session)
                await repository.delete_expired()
        """
        if self._session_factory is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self, metadata: MetaData) -> None:
        """Create missing tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def reset_schema(self, metadata: MetaData) -> None:
        """Drop and recreate every table. Destroys all data."""
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.drop_all)
            await conn.run_sync(metadata.create_all)

    async def health_check(self) -> bool:
        """True when a trivial query round-trips."""
        if self._engine is None:
            return False

        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Database health check failed: {e}")
            return False
        return True
