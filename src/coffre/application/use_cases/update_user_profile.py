"""
Update user profile use case.

Handles partial profile and preference updates.
"""

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from coffre.domain.entities.user import User
from coffre.domain.exceptions import EntityNotFoundError, ValidationError
from coffre.domain.repositories.i_user_repository import IUserRepository


@dataclass
class UpdateUserProfileCommand:
    """Command to update user profile; None leaves a field unchanged."""

    user_id: UUID
    email: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    preferences: Optional[dict[str, Any]] = None


class UpdateUserProfile:
    """
    Use case for updating user profile.

    Preferences are merged, not replaced. Email and username uniqueness is
    enforced by the repository.
    """

    def __init__(self, user_repository: IUserRepository):
        """
        Initialize use case.

        Args:
            user_repository: User repository
        """
        self.user_repository = user_repository

    async def execute(self, command: UpdateUserProfileCommand) -> User:
        """
        Update user profile.

        Args:
            command: Command with updated fields

        Returns:
            Updated user entity

        Raises:
            EntityNotFoundError: If user not found
            ValidationError: If a field value is rejected
            DuplicateEntityError: If email or username is taken
        """
        user = await self.user_repository.get_by_id(command.user_id, for_update=True)

        if not user:
            raise EntityNotFoundError("User", str(command.user_id))

        try:
            user.update_profile(
                email=command.email,
                username=command.username,
                first_name=command.first_name,
                last_name=command.last_name,
                bio=command.bio,
                avatar=command.avatar,
                preferences=command.preferences,
            )
        except ValueError as e:
            raise ValidationError(field="profile", reason=str(e))

        return await self.user_repository.update(user)
