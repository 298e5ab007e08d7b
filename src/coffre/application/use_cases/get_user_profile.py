"""
Get User Profile use case.
"""

from uuid import UUID

from coffre.domain.entities.user import User
from coffre.domain.exceptions import EntityNotFoundError
from coffre.domain.repositories.i_user_repository import IUserRepository


class GetUserProfile:
    """Retrieve a user by ID."""

    def __init__(self, user_repository: IUserRepository):
        self.user_repository = user_repository

    async def execute(self, user_id: UUID) -> User:
        """
        Get user profile.

        Args:
            user_id: User unique identifier

        Returns:
            User entity

        Raises:
            EntityNotFoundError: If user not found
        """
        user = await self.user_repository.get_by_id(user_id)

        if not user:
            raise EntityNotFoundError("User", str(user_id))

        return user
