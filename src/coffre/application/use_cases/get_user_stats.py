"""
Get User Stats use case.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from coffre.domain.clock import utcnow
from coffre.domain.exceptions import EntityNotFoundError
from coffre.domain.repositories.i_user_repository import IUserRepository


@dataclass
class UserStats:
    """Account summary for the profile page."""

    account_age_days: int
    last_login: Optional[datetime]
    active_sessions: int
    wallet_data: dict
    preferences: dict


class GetUserStats:
    """Summarize account age, sessions and cached wallet data."""

    def __init__(self, user_repository: IUserRepository):
        self.user_repository = user_repository

    async def execute(self, user_id: UUID) -> UserStats:
        """
        Raises:
            EntityNotFoundError: If user not found
        """
        user = await self.user_repository.get_by_id(user_id)
        if not user:
            raise EntityNotFoundError("User", str(user_id))

        now = utcnow()
        return UserStats(
            account_age_days=(now - user.created_at).days,
            last_login=user.security.last_login,
            active_sessions=sum(1 for s in user.sessions if not s.is_expired(now)),
            wallet_data=user.wallet_data.to_dict(),
            preferences=user.preferences.to_dict(),
        )
