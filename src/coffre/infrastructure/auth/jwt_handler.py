"""
JWT token handler for session tokens.

Signing parameters are passed in explicitly; this module never reads
global settings.
"""

from datetime import datetime, timezone
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt

from coffre.domain.exceptions.auth import ExpiredTokenError, InvalidTokenError
from coffre.domain.services.i_token_service import ITokenService, TokenClaims


def _to_epoch(moment: datetime) -> int:
    """Naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp())


def _from_epoch(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)


class JWTHandler(ITokenService):
    """
    HS256 (by default) session tokens.

    Claims: sub (user id), wallet, jti (session id), iat, exp, iss, aud.

    Example:
        >>> handler = JWTHandler(secret_key="...")
        >>> token = handler.create_token(claims)
        >>> handler.decode_token(token).session_id
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: str = "coffre-api",
        audience: str = "coffre",
    ):
        if not secret_key:
            raise ValueError("JWT secret key is required")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience

    def create_token(self, claims: TokenClaims) -> str:
        """
        Sign claims into an access token.

        Args:
            claims: User, wallet, session and validity window

        Returns:
            Encoded JWT token string
        """
        payload = {
            "sub": str(claims.user_id),
            "wallet": claims.wallet_address,
            "jti": str(claims.session_id),
            "iat": _to_epoch(claims.issued_at),
            "exp": _to_epoch(claims.expires_at),
            "iss": self.issuer,
            "aud": self.audience,
            "type": "access",
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> TokenClaims:
        """
        Decode and validate access token.

        Args:
            token: JWT token string

        Returns:
            TokenClaims carried by the token

        Raises:
            ExpiredTokenError: If token has expired
            InvalidTokenError: If token is invalid or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
        except ExpiredSignatureError:
            raise ExpiredTokenError()
        except JWTError:
            raise InvalidTokenError()

        if payload.get("type") != "access":
            raise InvalidTokenError()

        try:
            return TokenClaims(
                user_id=UUID(payload["sub"]),
                wallet_address=payload["wallet"],
                session_id=UUID(payload["jti"]),
                issued_at=_from_epoch(payload["iat"]),
                expires_at=_from_epoch(payload["exp"]),
            )
        except (KeyError, TypeError, ValueError):
            raise InvalidTokenError()
