"""
Dependency Injection Container for Coffre.

Manages all service instances and their dependencies. Settings are read
here and passed down as explicit constructor arguments.
"""

import asyncio
from datetime import timedelta
from ipaddress import ip_network
from typing import Optional

import aiohttp
from sqlalchemy.ext.asyncio import AsyncSession

from coffre.application.services.session_manager import SessionManager
from coffre.application.services.simulation_engine import (
    SimulationEngine,
    SimulationPolicy,
)
from coffre.config.settings import Settings, get_settings
from coffre.domain.repositories.i_simulation_repository import (
    ISimulationRepository,
)
from coffre.domain.repositories.i_user_repository import IUserRepository
from coffre.domain.services.i_chain_oracle import IChainOracle
from coffre.domain.services.i_token_service import ITokenService
from coffre.domain.services.i_transaction_explorer import ITransactionExplorer
from coffre.infrastructure.auth.jwt_handler import JWTHandler
from coffre.infrastructure.blockchain.etherscan_client import EtherscanClient
from coffre.infrastructure.blockchain.web3_chain_oracle import (
    TRANSIENT_ERRORS,
    Web3ChainOracle,
)
from coffre.infrastructure.monitoring.logger import get_logger
from coffre.infrastructure.persistence.database import Database
from coffre.infrastructure.persistence.repositories.simulation_repository import (
    SimulationRepository,
)
from coffre.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)
from coffre.infrastructure.rate_limiting.rate_limiter import RateLimiter
from coffre.infrastructure.resilience import (
    CircuitBreaker,
    CircuitBreakerConfig,
    Retry,
    RetryConfig,
)
from coffre.infrastructure.tasks.retention_sweeper import RetentionSweeper
from coffre.infrastructure.tasks.simulation_executor import SimulationExecutor

logger = get_logger(__name__)


class DIContainer:
    """
    Dependency Injection Container.

    Manages singleton instances of long-lived services. Repositories and
    engines are session-scoped and built by factory methods.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize container with None instances."""
        self.settings = settings or get_settings()

        # Infrastructure
        self._database: Optional[Database] = None
        self._rate_limiter: Optional[RateLimiter] = None
        self._trusted_proxies: Optional[tuple] = None

        # Domain Services
        self._token_service: Optional[ITokenService] = None
        self._chain_oracle: Optional[IChainOracle] = None
        self._transaction_explorer: Optional[ITransactionExplorer] = None

        # Background tasks
        self._simulation_executor: Optional[SimulationExecutor] = None
        self._retention_sweeper: Optional[RetentionSweeper] = None

    async def initialize(self) -> None:
        """Initialize all services and establish connections."""
        await self.database.connect()

    async def start_background_tasks(self) -> None:
        """Start the retention sweeper (no-op when disabled)."""
        self.retention_sweeper.start()

    async def shutdown(self) -> None:
        """Cleanup resources and close connections."""
        if self._retention_sweeper:
            await self._retention_sweeper.stop()

        if self._simulation_executor:
            await self._simulation_executor.shutdown()

        if self._chain_oracle:
            await self._chain_oracle.close()

        if self._transaction_explorer:
            await self._transaction_explorer.close()

        if self._database:
            await self._database.disconnect()

    # ================================================================
    # Infrastructure Getters
    # ================================================================

    @property
    def database(self) -> Database:
        """Get database instance."""
        if self._database is None:
            self._database = Database(
                database_url=self.settings.DATABASE_URL,
                echo=self.settings.DATABASE_ECHO,
            )
        return self._database

    @property
    def rate_limiter(self) -> RateLimiter:
        """Get per-client rate limiter."""
        if self._rate_limiter is None:
            self._rate_limiter = RateLimiter(
                requests_per_second=self.settings.RATE_LIMIT_REQUESTS_PER_SECOND,
                burst_size=self.settings.RATE_LIMIT_BURST_SIZE,
            )
        return self._rate_limiter

    @property
    def trusted_proxies(self) -> tuple:
        """Networks whose X-Forwarded-For header is honored."""
        if self._trusted_proxies is None:
            self._trusted_proxies = tuple(
                ip_network(proxy, strict=False)
                for proxy in self.settings.TRUSTED_PROXIES
            )
        return self._trusted_proxies

    def _circuit_breaker(self, name: str) -> CircuitBreaker:
        return CircuitBreaker(
            name,
            CircuitBreakerConfig(
                failure_threshold=self.settings.CB_FAILURE_THRESHOLD,
                success_threshold=self.settings.CB_SUCCESS_THRESHOLD,
                timeout=self.settings.CB_TIMEOUT_SECONDS,
            ),
        )

    def _retry(self, retry_on: tuple) -> Retry:
        return Retry(
            RetryConfig(
                max_attempts=self.settings.RETRY_MAX_ATTEMPTS,
                initial_delay=self.settings.RETRY_INITIAL_DELAY,
                max_delay=self.settings.RETRY_MAX_DELAY,
                retry_on=retry_on,
            )
        )

    # ================================================================
    # Domain Service Getters
    # ================================================================

    @property
    def token_service(self) -> ITokenService:
        """Get JWT token service."""
        if self._token_service is None:
            self._token_service = JWTHandler(
                secret_key=self.settings.JWT_SECRET_KEY,
                algorithm=self.settings.JWT_ALGORITHM,
                issuer=self.settings.JWT_ISSUER,
                audience=self.settings.JWT_AUDIENCE,
            )
        return self._token_service

    @property
    def chain_oracle(self) -> IChainOracle:
        """Get Ethereum chain oracle."""
        if self._chain_oracle is None:
            self._chain_oracle = Web3ChainOracle(
                rpc_url=self.settings.ETHEREUM_RPC_URL,
                network_name=self.settings.ETHEREUM_NETWORK,
                timeout=self.settings.BLOCKCHAIN_QUERY_TIMEOUT,
                circuit_breaker=self._circuit_breaker("ethereum_rpc"),
                retry=self._retry(TRANSIENT_ERRORS),
            )
        return self._chain_oracle

    @property
    def transaction_explorer(self) -> ITransactionExplorer:
        """Get Etherscan client."""
        if self._transaction_explorer is None:
            self._transaction_explorer = EtherscanClient(
                api_url=self.settings.ETHERSCAN_API_URL,
                api_key=self.settings.ETHERSCAN_API_KEY,
                timeout=self.settings.ETHERSCAN_TIMEOUT,
                circuit_breaker=self._circuit_breaker("etherscan"),
                retry=self._retry((aiohttp.ClientError, asyncio.TimeoutError)),
            )
        return self._transaction_explorer

    @property
    def simulation_policy(self) -> SimulationPolicy:
        return SimulationPolicy(
            retention=timedelta(hours=self.settings.SIMULATION_RETENTION_HOURS),
            execution_timeout=self.settings.SIMULATION_EXECUTION_TIMEOUT,
            default_gas_limit=self.settings.SIMULATION_DEFAULT_GAS_LIMIT,
            default_gas_price_gwei=self.settings.SIMULATION_DEFAULT_GAS_PRICE_GWEI,
            chain_id=self.settings.ETHEREUM_CHAIN_ID,
            network_name=self.settings.ETHEREUM_NETWORK,
            stats_window=self.settings.SIMULATION_STATS_WINDOW,
            max_list_limit=self.settings.SIMULATION_LIST_MAX_LIMIT,
        )

    # ================================================================
    # Background Tasks
    # ================================================================

    @property
    def simulation_executor(self) -> SimulationExecutor:
        """Get simulation task pool."""
        if self._simulation_executor is None:
            self._simulation_executor = SimulationExecutor(
                runner=self._run_simulation,
                max_concurrency=self.settings.SIMULATION_WORKERS,
            )
        return self._simulation_executor

    async def _run_simulation(self, simulation_id: str) -> None:
        """Execute one simulation in its own database session."""
        async with self.database.session() as session:
            engine = self.get_simulation_engine(session, with_executor=False)
            await engine.execute(simulation_id)

    @property
    def retention_sweeper(self) -> RetentionSweeper:
        """Get expired simulation sweeper."""
        if self._retention_sweeper is None:
            self._retention_sweeper = RetentionSweeper(
                purge=self._purge_expired,
                interval_seconds=self.settings.SIMULATION_SWEEP_INTERVAL_SECONDS,
            )
        return self._retention_sweeper

    async def _purge_expired(self) -> int:
        async with self.database.session() as session:
            return await self.get_simulation_repository(session).delete_expired()

    # ================================================================
    # Session-scoped Factories
    # ================================================================

    def get_user_repository(self, session: AsyncSession) -> IUserRepository:
        """Get user repository bound to session."""
        return UserRepository(session)

    def get_simulation_repository(
        self, session: AsyncSession
    ) -> ISimulationRepository:
        """Get simulation repository bound to session."""
        return SimulationRepository(
            session,
            retention=timedelta(hours=self.settings.SIMULATION_RETENTION_HOURS),
        )

    def get_session_manager(self, session: AsyncSession) -> SessionManager:
        """Get session manager bound to session."""
        return SessionManager(
            user_repository=self.get_user_repository(session),
            token_service=self.token_service,
            session_ttl=timedelta(hours=self.settings.JWT_EXPIRATION_HOURS),
            max_sessions=self.settings.MAX_SESSIONS_PER_USER,
        )

    def get_simulation_engine(
        self, session: AsyncSession, with_executor: bool = True
    ) -> SimulationEngine:
        """Get simulation engine bound to session."""
        return SimulationEngine(
            simulation_repository=self.get_simulation_repository(session),
            chain_oracle=self.chain_oracle,
            executor=self.simulation_executor if with_executor else None,
            policy=self.simulation_policy,
        )


_container: Optional[DIContainer] = None


def get_container() -> DIContainer:
    """Get global DI container instance."""
    global _container
    if _container is None:
        _container = DIContainer()
    return _container


async def initialize_container() -> DIContainer:
    """Initialize and return DI container."""
    container = get_container()
    await container.initialize()
    return container


async def shutdown_container() -> None:
    """Shutdown DI container."""
    if _container is not None:
        await _container.shutdown()


def reset_container() -> None:
    """Drop the global container (for testing)."""
    global _container
    _container = None
