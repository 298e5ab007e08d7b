"""
Bearer token service interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class TokenClaims:
    """Claims carried by a session token."""

    user_id: UUID
    wallet_address: str
    session_id: UUID
    issued_at: datetime
    expires_at: datetime


class ITokenService(ABC):
    """Signs and verifies self-describing session tokens."""

    @abstractmethod
    def create_token(self, claims: TokenClaims) -> str:
        """Sign claims into a bearer token."""

    @abstractmethod
    def decode_token(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry, returning the claims.

        Raises:
            InvalidTokenError: Malformed, tampered or foreign token
            ExpiredTokenError: Token past its expiry
        """
