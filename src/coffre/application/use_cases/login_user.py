"""
Login User use case.
"""

from dataclasses import dataclass
from typing import Optional

from coffre.application.services.session_manager import (
    ClientMetadata,
    IssuedSession,
    SessionManager,
)
from coffre.domain.entities.user import User
from coffre.domain.exceptions import (
    AccountLockedError,
    DuplicateEntityError,
    ValidationError,
)
from coffre.domain.repositories.i_user_repository import IUserRepository
from coffre.domain.value_objects.wallet_address import WalletAddress
from coffre.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LoginResult:
    """Login outcome returned to the caller."""

    issued: IssuedSession
    is_new_user: bool


class LoginUser:
    """
    Log a wallet in.

    Business rules:
    - Unknown wallets are registered on first login
    - Locked accounts cannot log in
    - Each login issues a fresh session (oldest evicted beyond the bound)
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        session_manager: SessionManager,
    ):
        """
        Initialize use case with dependencies.

        Args:
            user_repository: Repository for user persistence
            session_manager: Issues session tokens
        """
        self.user_repository = user_repository
        self.session_manager = session_manager

    async def execute(
        self,
        wallet_address: str,
        client: Optional[ClientMetadata] = None,
    ) -> LoginResult:
        """
        Execute login.

        Args:
            wallet_address: Wallet address logging in
            client: Origin IP and user agent

        Returns:
            LoginResult with token, session and user

        Raises:
            ValidationError: If wallet address is malformed
            AccountLockedError: If account is locked
        """
        try:
            wallet = WalletAddress(wallet_address)
        except ValueError:
            raise ValidationError(
                field="wallet_address",
                reason="Invalid Ethereum address format",
            )

        # 1. Find or create user
        user, is_new_user = await self._find_or_create(str(wallet))

        # 2. Refuse locked accounts
        if user.security.is_locked():
            logger.warning(
                "Login refused for locked account",
                extra={"wallet_address": user.wallet_address},
            )
            raise AccountLockedError(user.security.lock_until)

        # 3. Issue session
        issued = await self.session_manager.issue(user, client)

        logger.info(
            "User logged in",
            extra={"wallet_address": user.wallet_address, "is_new_user": is_new_user},
        )

        return LoginResult(issued=issued, is_new_user=is_new_user)

    async def _find_or_create(self, wallet_address: str) -> tuple[User, bool]:
        user = await self.user_repository.get_by_wallet(wallet_address)
        if user:
            return user, False

        try:
            created = await self.user_repository.create(
                User(wallet_address=wallet_address)
            )
            return created, True
        except DuplicateEntityError:
            # Lost a race with a concurrent first login
            user = await self.user_repository.get_by_wallet(wallet_address)
            if user is None:
                raise
            return user, False
