"""
Session manager - issues, validates and revokes bearer tokens.

Token signature and expiry prove authenticity; the user's stored session
list decides liveness. A well-formed, unexpired token whose session was
evicted or logged out is rejected as revoked.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import uuid4

from coffre.domain.clock import utcnow
from coffre.domain.entities.user import Session, User
from coffre.domain.exceptions import (
    EntityNotFoundError,
    ExpiredTokenError,
    InvalidTokenError,
    RevokedSessionError,
)
from coffre.domain.repositories.i_user_repository import IUserRepository
from coffre.domain.services.i_token_service import ITokenService, TokenClaims
from coffre.infrastructure.monitoring import metrics
from coffre.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ClientMetadata:
    """Where a login came from."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class IssuedSession:
    """Result of a successful login."""

    token: str
    session: Session
    user: User


@dataclass
class ValidatedSession:
    """Result of a successful token validation."""

    user: User
    session: Session


class SessionManager:
    """
    Bounded, non-sliding session window per user.

    Every session-list mutation reloads the user with a row lock so
    concurrent logins and logouts of one wallet serialize.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        token_service: ITokenService,
        session_ttl: timedelta = timedelta(hours=24),
        max_sessions: int = 5,
    ):
        """
        Initialize session manager.

        Args:
            user_repository: Repository for user persistence
            token_service: Signs and verifies session tokens
            session_ttl: Fixed lifetime of every session
            max_sessions: Sessions kept per user; oldest evicted beyond it
        """
        self.user_repository = user_repository
        self.token_service = token_service
        self.session_ttl = session_ttl
        self.max_sessions = max_sessions

    async def issue(
        self, user: User, client: Optional[ClientMetadata] = None
    ) -> IssuedSession:
        """
        Issue a new session token for user.

        Args:
            user: Authenticated user
            client: Origin IP and user agent of the login request

        Returns:
            IssuedSession with the bearer token and updated user

        Raises:
            EntityNotFoundError: If user vanished before it could be locked
        """
        client = client or ClientMetadata()

        # 1. Lock user row
        locked = await self.user_repository.get_by_id(user.id, for_update=True)
        if locked is None:
            raise EntityNotFoundError("User", str(user.id))

        # 2. Sign token bound to a fresh session id
        now = utcnow()
        session_id = uuid4()
        expires_at = now + self.session_ttl
        token = self.token_service.create_token(
            TokenClaims(
                user_id=locked.id,
                wallet_address=locked.wallet_address,
                session_id=session_id,
                issued_at=now,
                expires_at=expires_at,
            )
        )

        # 3. Store only the token hash, evicting beyond the bound
        session = Session(
            id=session_id,
            token_hash=Session.hash_token(token),
            created_at=now,
            expires_at=expires_at,
            ip_address=client.ip_address,
            user_agent=client.user_agent,
        )
        evicted = locked.add_session(session, self.max_sessions)
        locked.record_login(now)

        updated = await self.user_repository.update(locked)

        metrics.sessions_issued_total.inc()
        if evicted:
            metrics.sessions_evicted_total.inc(len(evicted))

        logger.info(
            "Session issued",
            extra={
                "wallet_address": updated.wallet_address,
                "session_id": str(session_id),
                "evicted_sessions": len(evicted),
            },
        )

        return IssuedSession(token=token, session=session, user=updated)

    async def validate(self, token: str) -> ValidatedSession:
        """
        Validate a bearer token against its stored session.

        Args:
            token: Bearer token string

        Returns:
            ValidatedSession with user and matching session

        Raises:
            InvalidTokenError: Malformed, tampered or unknown-user token
            ExpiredTokenError: Token or session past expiry
            RevokedSessionError: Session evicted or logged out
        """
        try:
            claims = self.token_service.decode_token(token)

            user = await self.user_repository.get_by_id(claims.user_id)
            if user is None or user.wallet_address != claims.wallet_address.lower():
                raise InvalidTokenError()

            session = user.find_session(Session.hash_token(token))
            if session is None:
                raise RevokedSessionError()

            if session.is_expired():
                raise ExpiredTokenError()
        except (InvalidTokenError, ExpiredTokenError, RevokedSessionError) as e:
            metrics.auth_failures_total.labels(reason=e.code).inc()
            raise

        return ValidatedSession(user=user, session=session)

    async def revoke(self, wallet_address: str, token: str) -> bool:
        """
        Remove the session bound to token.

        Revoking a token that is not active is a no-op.

        Args:
            wallet_address: Owner wallet address
            token: Bearer token to revoke

        Returns:
            True if a session was removed

        Raises:
            EntityNotFoundError: If no user owns wallet_address
        """
        user = await self.user_repository.get_by_wallet(
            wallet_address, for_update=True
        )
        if user is None:
            raise EntityNotFoundError("User", wallet_address)

        if not user.remove_session(Session.hash_token(token)):
            return False

        await self.user_repository.update(user)
        metrics.sessions_revoked_total.inc()

        logger.info("Session revoked", extra={"wallet_address": user.wallet_address})
        return True
