"""
User repository implementation using SQLAlchemy.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coffre.domain.entities.user import (
    SecurityInfo,
    Session,
    User,
    UserPreferences,
    UserProfile,
    WalletData,
)
from coffre.domain.exceptions import DuplicateEntityError, EntityNotFoundError
from coffre.domain.repositories.i_user_repository import IUserRepository
from coffre.infrastructure.persistence.models import UserModel, UserSessionModel


class UserRepository(IUserRepository):
    """
    SQLAlchemy implementation of user repository.

    Sessions live in their own table and are synchronized on update.
    Unique violations roll back the transaction and raise
    DuplicateEntityError.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def create(self, user: User) -> User:
        """
        Create new user in database.

        Args:
            user: User entity to create

        Returns:
            Created user entity

        Raises:
            DuplicateEntityError: If wallet, email or username is taken
        """
        model = UserModel(id=user.id, created_at=user.created_at)
        self._apply(model, user)
        model.sessions = [self._session_to_model(s, user.id) for s in user.sessions]

        self.session.add(model)
        await self._flush(user)

        return self._to_entity(model)

    async def get_by_id(
        self, user_id: UUID, for_update: bool = False
    ) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: User unique identifier
            for_update: Lock the user row until the transaction ends

        Returns:
            User entity if found, None otherwise
        """
        model = await self._fetch(UserModel.id == user_id, for_update)
        return self._to_entity(model) if model else None

    async def get_by_wallet(
        self, wallet_address: str, for_update: bool = False
    ) -> Optional[User]:
        """
        Get user by wallet address.

        Args:
            wallet_address: Wallet address (any casing)
            for_update: Lock the user row until the transaction ends

        Returns:
            User entity if found, None otherwise
        """
        model = await self._fetch(
            UserModel.wallet_address == wallet_address.lower(), for_update
        )
        return self._to_entity(model) if model else None

    async def update(self, user: User) -> User:
        """
        Update existing user, synchronizing its session rows.

        Args:
            user: User entity with updated fields

        Returns:
            Updated user entity

        Raises:
            EntityNotFoundError: If user not found
            DuplicateEntityError: If email or username is taken
        """
        model = await self._fetch(UserModel.id == user.id, for_update=False)

        if not model:
            raise EntityNotFoundError("User", str(user.id))

        self._apply(model, user)

        # Sync sessions: drop removed rows, add new ones
        wanted = {s.id: s for s in user.sessions}
        model.sessions = [row for row in model.sessions if row.id in wanted]
        existing = {row.id for row in model.sessions}
        for session_id, session in wanted.items():
            if session_id not in existing:
                model.sessions.append(self._session_to_model(session, user.id))

        await self._flush(user)

        return self._to_entity(model)

    async def _fetch(self, criterion, for_update: bool) -> Optional[UserModel]:
        stmt = select(UserModel).where(criterion)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(
            stmt.execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _flush(self, user: User) -> None:
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateEntityError(
                "User", f"wallet {user.wallet_address}, email or username"
            )

    @staticmethod
    def _apply(model: UserModel, user: User) -> None:
        """Copy entity fields onto the ORM model."""
        model.wallet_address = user.wallet_address
        model.email = user.email
        model.username = user.username
        model.first_name = user.profile.first_name
        model.last_name = user.profile.last_name
        model.bio = user.profile.bio
        model.avatar = user.profile.avatar
        model.preferences = user.preferences.to_dict()
        model.last_login = user.security.last_login
        model.login_attempts = user.security.login_attempts
        model.lock_until = user.security.lock_until
        model.two_factor_enabled = user.security.two_factor_enabled
        model.last_balance = user.wallet_data.last_balance
        model.last_balance_update = user.wallet_data.last_balance_update
        model.transaction_count = user.wallet_data.transaction_count
        model.is_active = user.is_active
        model.updated_at = user.updated_at

    @staticmethod
    def _session_to_model(session: Session, user_id: UUID) -> UserSessionModel:
        return UserSessionModel(
            id=session.id,
            user_id=user_id,
            token_hash=session.token_hash,
            ip_address=session.ip_address,
            user_agent=session.user_agent,
            created_at=session.created_at,
            expires_at=session.expires_at,
        )

    def _to_entity(self, model: UserModel) -> User:
        """Convert ORM model to domain entity."""
        return User(
            id=model.id,
            wallet_address=model.wallet_address,
            email=model.email,
            username=model.username,
            profile=UserProfile(
                first_name=model.first_name,
                last_name=model.last_name,
                bio=model.bio,
                avatar=model.avatar,
            ),
            preferences=UserPreferences.from_dict(model.preferences),
            sessions=sorted(
                (
                    Session(
                        id=row.id,
                        token_hash=row.token_hash,
                        created_at=row.created_at,
                        expires_at=row.expires_at,
                        ip_address=row.ip_address,
                        user_agent=row.user_agent,
                    )
                    for row in model.sessions
                ),
                key=lambda s: s.created_at,
            ),
            security=SecurityInfo(
                last_login=model.last_login,
                login_attempts=model.login_attempts or 0,
                lock_until=model.lock_until,
                two_factor_enabled=bool(model.two_factor_enabled),
            ),
            wallet_data=WalletData(
                last_balance=model.last_balance,
                last_balance_update=model.last_balance_update,
                transaction_count=model.transaction_count or 0,
            ),
            is_active=bool(model.is_active),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
