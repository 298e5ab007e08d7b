"""
User entity - Domain model for wallet holders.
"""

import hashlib
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID, uuid4

from coffre.domain.clock import utcnow
from coffre.domain.value_objects.wallet_address import is_valid_address

USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_]{3,30}")


class Currency(str, Enum):
    """Display currency preference."""

    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    ETH = "ETH"


@dataclass
class UserProfile:
    """Optional personal details."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "bio": self.bio,
            "avatar": self.avatar,
        }


@dataclass
class UserPreferences:
    """Display and notification preferences."""

    currency: Currency = Currency.USD
    notify_email: bool = True
    notify_push: bool = True
    notify_transactions: bool = True
    show_balance: bool = False
    show_transactions: bool = False

    def to_dict(self) -> dict:
        return {
            "currency": self.currency.value,
            "notifications": {
                "email": self.notify_email,
                "push": self.notify_push,
                "transactions": self.notify_transactions,
            },
            "privacy": {
                "show_balance": self.show_balance,
                "show_transactions": self.show_transactions,
            },
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "UserPreferences":
        """Build preferences from the nested dict form (missing keys default)."""
        preferences = cls()
        if data:
            preferences.merge(data)
        return preferences

    def merge(self, data: dict[str, Any]) -> None:
        """
        Apply a partial nested update.

        Only keys present in data change; unknown currencies raise ValueError.
        """
        if data.get("currency") is not None:
            self.currency = Currency(data["currency"])

        notifications = data.get("notifications") or {}
        if notifications.get("email") is not None:
            self.notify_email = bool(notifications["email"])
        if notifications.get("push") is not None:
            self.notify_push = bool(notifications["push"])
        if notifications.get("transactions") is not None:
            self.notify_transactions = bool(notifications["transactions"])

        privacy = data.get("privacy") or {}
        if privacy.get("show_balance") is not None:
            self.show_balance = bool(privacy["show_balance"])
        if privacy.get("show_transactions") is not None:
            self.show_transactions = bool(privacy["show_transactions"])


@dataclass
class SecurityInfo:
    """Login bookkeeping; never exposed in public views."""

    last_login: Optional[datetime] = None
    login_attempts: int = 0
    lock_until: Optional[datetime] = None
    two_factor_enabled: bool = False

    def is_locked(self, now: Optional[datetime] = None) -> bool:
        """Check whether the account is currently locked."""
        return self.lock_until is not None and self.lock_until > (now or utcnow())


@dataclass
class WalletData:
    """Last observed on-chain data for the user's wallet."""

    last_balance: Optional[str] = None
    last_balance_update: Optional[datetime] = None
    transaction_count: int = 0

    def to_dict(self) -> dict:
        return {
            "last_balance": self.last_balance,
            "last_balance_update": self.last_balance_update,
            "transaction_count": self.transaction_count,
        }


@dataclass
class Session:
    """
    Authentication grant bound to one issued token.

    Only the SHA-256 hash of the bearer token is kept.
    """

    token_hash: str
    expires_at: datetime
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @staticmethod
    def hash_token(token: str) -> str:
        """Digest used to store and look up bearer tokens."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Session is valid only while now < expires_at."""
        return (now or utcnow()) >= self.expires_at


@dataclass
class User:
    """
    User entity - identity keyed by wallet address.

    Created on first login and never hard-deleted here. The wallet address
    is normalized to lowercase and must not change after creation.
    """

    wallet_address: str
    id: UUID = field(default_factory=uuid4)
    email: Optional[str] = None
    username: Optional[str] = None
    profile: UserProfile = field(default_factory=UserProfile)
    preferences: UserPreferences = field(default_factory=UserPreferences)
    sessions: List[Session] = field(default_factory=list)
    security: SecurityInfo = field(default_factory=SecurityInfo)
    wallet_data: WalletData = field(default_factory=WalletData)
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        """Validate user data after initialization."""
        if not self.wallet_address:
            raise ValueError("Wallet address is required")

        if not is_valid_address(self.wallet_address):
            raise ValueError(f"Invalid wallet address: {self.wallet_address}")

        self.wallet_address = self.wallet_address.lower()

    # ================================================================
    # Sessions
    # ================================================================

    def add_session(self, session: Session, max_sessions: int) -> List[Session]:
        """
        Append a session, keeping only the most recent max_sessions.

        Args:
            session: Newly issued session
            max_sessions: Upper bound on active sessions

        Returns:
            Sessions evicted to honour the bound (oldest first)
        """
        self.sessions.append(session)
        self.sessions.sort(key=lambda s: s.created_at)

        evicted: List[Session] = []
        while len(self.sessions) > max_sessions:
            evicted.append(self.sessions.pop(0))

        self.updated_at = utcnow()
        return evicted

    def find_session(self, token_hash: str) -> Optional[Session]:
        """Find active session by token hash."""
        for session in self.sessions:
            if session.token_hash == token_hash:
                return session
        return None

    def remove_session(self, token_hash: str) -> bool:
        """
        Remove session by token hash.

        Returns:
            True if a session was removed, False if none matched
        """
        remaining = [s for s in self.sessions if s.token_hash != token_hash]
        if len(remaining) == len(self.sessions):
            return False

        self.sessions = remaining
        self.updated_at = utcnow()
        return True

    def record_login(self, now: Optional[datetime] = None) -> None:
        """Stamp last login and reset the failed-attempt counter."""
        self.security.last_login = now or utcnow()
        self.security.login_attempts = 0
        self.updated_at = utcnow()

    # ================================================================
    # Profile
    # ================================================================

    def update_profile(
        self,
        email: Optional[str] = None,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        bio: Optional[str] = None,
        avatar: Optional[str] = None,
        preferences: Optional[dict[str, Any]] = None,
    ) -> None:
        """Apply a partial profile update; None leaves a field unchanged."""
        if email is not None:
            self.email = email.strip().lower()
        if username is not None:
            username = username.strip()
            if not USERNAME_PATTERN.fullmatch(username):
                raise ValueError(
                    "Username must be 3-30 letters, digits or underscores"
                )
            self.username = username

        if first_name is not None:
            self.profile.first_name = first_name.strip()
        if last_name is not None:
            self.profile.last_name = last_name.strip()
        if bio is not None:
            self.profile.bio = bio.strip()
        if avatar is not None:
            self.profile.avatar = avatar

        if preferences:
            self.preferences.merge(preferences)

        self.updated_at = utcnow()

    def record_balance(self, balance: str, observed_at: Optional[datetime] = None):
        """Remember the latest balance seen for this wallet."""
        self.wallet_data.last_balance = balance
        self.wallet_data.last_balance_update = observed_at or utcnow()
        self.updated_at = utcnow()

    def to_public_dict(self) -> dict:
        """Public view - omits sessions and security metadata."""
        return {
            "id": str(self.id),
            "wallet_address": self.wallet_address,
            "email": self.email,
            "username": self.username,
            "profile": self.profile.to_dict(),
            "preferences": self.preferences.to_dict(),
            "wallet_data": self.wallet_data.to_dict(),
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
