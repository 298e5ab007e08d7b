"""
Authentication dependencies for bearer session tokens.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from coffre.application.services.session_manager import (
    SessionManager,
    ValidatedSession,
)
from coffre.di.dependencies import get_session_manager
from coffre.domain.entities.user import User
from coffre.domain.exceptions import AuthenticationError

# Bearer token security scheme; missing tokens are reported by us
security = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Extract the raw bearer token.

    Raises:
        AuthenticationError: If the Authorization header is missing
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")
    return credentials.credentials


async def get_current_session(
    token: str = Depends(get_bearer_token),
    session_manager: SessionManager = Depends(get_session_manager),
) -> ValidatedSession:
    """
    Validate the bearer token against the stored session list.

    Raises:
        InvalidTokenError: Malformed, tampered or unknown token (401)
        ExpiredTokenError: Expired token or session (401)
        RevokedSessionError: Logged out or evicted session (401)
    """
    return await session_manager.validate(token)


async def get_current_user(
    current: ValidatedSession = Depends(get_current_session),
) -> User:
    """Authenticated user entity."""
    return current.user


async def get_current_wallet(
    current_user: User = Depends(get_current_user),
) -> str:
    """Authenticated wallet address (lowercase)."""
    return current_user.wallet_address
