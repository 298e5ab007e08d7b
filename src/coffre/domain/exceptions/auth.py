"""
Authentication domain exceptions.

Each failure carries its own code so clients can tell a re-login case
(expired, revoked) from a broken token.
"""

from datetime import datetime

from coffre.domain.exceptions.base import CoffreException


class AuthenticationError(CoffreException):
    """Raised when authentication fails."""

    def __init__(
        self,
        message: str = "Authentication failed",
        code: str = "AUTHENTICATION_ERROR",
    ):
        super().__init__(message, code=code)


class InvalidTokenError(AuthenticationError):
    """Raised when a token is malformed, tampered or unknown."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="AUTH_INVALID")


class ExpiredTokenError(AuthenticationError):
    """Raised when the token or its session has expired."""

    def __init__(self):
        super().__init__("Authentication token has expired", code="AUTH_EXPIRED")


class RevokedSessionError(AuthenticationError):
    """Raised when the token no longer matches an active session."""

    def __init__(self):
        super().__init__(
            "Session has been revoked or superseded",
            code="AUTH_REVOKED",
        )


class AccountLockedError(AuthenticationError):
    """Raised when a locked account tries to log in."""

    def __init__(self, lock_until: datetime):
        self.lock_until = lock_until
        super().__init__(
            f"Account is locked until {lock_until.isoformat()}",
            code="ACCOUNT_LOCKED",
        )
