"""
FastAPI dependency injection.

Provides dependencies for FastAPI routes using the DI container. Each
request gets one database session; everything built on it shares the
same transaction.
"""

from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coffre.application.services.session_manager import SessionManager
from coffre.application.services.simulation_engine import SimulationEngine
from coffre.application.use_cases.get_transaction_history import (
    GetTransactionHistory,
)
from coffre.application.use_cases.get_user_profile import GetUserProfile
from coffre.application.use_cases.get_user_stats import GetUserStats
from coffre.application.use_cases.get_wallet_balance import GetWalletBalance
from coffre.application.use_cases.get_wallet_overview import GetWalletOverview
from coffre.application.use_cases.login_user import LoginUser
from coffre.application.use_cases.update_user_profile import UpdateUserProfile
from coffre.di.container import get_container

# ================================================================
# Database Dependencies
# ================================================================


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get database session dependency.

    Commits when the request succeeds, rolls back otherwise.
    """
    container = get_container()
    async with container.database.session() as session:
        yield session


# ================================================================
# Service Dependencies
# ================================================================


def get_session_manager(
    session: AsyncSession = Depends(get_db_session),
) -> SessionManager:
    """Get SessionManager dependency."""
    return get_container().get_session_manager(session)


def get_simulation_engine(
    session: AsyncSession = Depends(get_db_session),
) -> SimulationEngine:
    """Get SimulationEngine dependency."""
    return get_container().get_simulation_engine(session)


# ================================================================
# Use Case Dependencies
# ================================================================


def get_login_user(
    session: AsyncSession = Depends(get_db_session),
) -> LoginUser:
    """Get LoginUser use case dependency."""
    container = get_container()
    return LoginUser(
        user_repository=container.get_user_repository(session),
        session_manager=container.get_session_manager(session),
    )


def get_get_user_profile(
    session: AsyncSession = Depends(get_db_session),
) -> GetUserProfile:
    """Get GetUserProfile use case dependency."""
    return GetUserProfile(get_container().get_user_repository(session))


def get_update_user_profile(
    session: AsyncSession = Depends(get_db_session),
) -> UpdateUserProfile:
    """Get UpdateUserProfile use case dependency."""
    return UpdateUserProfile(get_container().get_user_repository(session))


def get_get_user_stats(
    session: AsyncSession = Depends(get_db_session),
) -> GetUserStats:
    """Get GetUserStats use case dependency."""
    return GetUserStats(get_container().get_user_repository(session))


def get_get_wallet_balance(
    session: AsyncSession = Depends(get_db_session),
) -> GetWalletBalance:
    """Get GetWalletBalance use case dependency."""
    container = get_container()
    return GetWalletBalance(
        chain_oracle=container.chain_oracle,
        user_repository=container.get_user_repository(session),
    )


def get_get_transaction_history() -> GetTransactionHistory:
    """Get GetTransactionHistory use case dependency."""
    return GetTransactionHistory(get_container().transaction_explorer)


def get_get_wallet_overview(
    get_wallet_balance: GetWalletBalance = Depends(get_get_wallet_balance),
    get_transaction_history: GetTransactionHistory = Depends(
        get_get_transaction_history
    ),
) -> GetWalletOverview:
    """Get GetWalletOverview use case dependency."""
    return GetWalletOverview(get_wallet_balance, get_transaction_history)
