"""
User repository interface.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from coffre.domain.entities.user import User


class IUserRepository(ABC):
    """Interface for user persistence operations."""

    @abstractmethod
    async def create(self, user: User) -> User:
        """
        Create new user.

        Args:
            user: User entity to create

        Returns:
            Created user entity

        Raises:
            DuplicateEntityError: If the wallet address is already registered
        """

    @abstractmethod
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

    @abstractmethod
    async def get_by_wallet(
        self, wallet_address: str, for_update: bool = False
    ) -> Optional[User]:
        """
        Get user by wallet address (case-insensitive).

        Args:
            wallet_address: Wallet address
            for_update: Lock the user row until the transaction ends

        Returns:
            User entity if found, None otherwise
        """

    @abstractmethod
    async def update(self, user: User) -> User:
        """
        Update existing user, including its session list.

        Args:
            user: User entity with updated data

        Returns:
            Updated user entity

        Raises:
            EntityNotFoundError: If user does not exist
            DuplicateEntityError: If email or username is taken
        """
