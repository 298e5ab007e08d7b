"""
Unit tests for User entity.

Usage:
    pytest tests/unit/domain/test_user.py
"""

from datetime import timedelta

import pytest

from coffre.domain.clock import utcnow
from coffre.domain.entities.user import Currency, Session, User, UserPreferences

WALLET = "0x742D35CC6634C0532925A3B844BC454E4438F44E"


class TestUser:
    """Unit tests for User entity."""

    # ================================================================
    # Helper Methods
    # ================================================================

    def _session(self, token: str, age_minutes: int = 0) -> Session:
        created = utcnow() - timedelta(minutes=age_minutes)
        return Session(
            token_hash=Session.hash_token(token),
            created_at=created,
            expires_at=created + timedelta(hours=24),
        )

    # ================================================================
    # Creation
    # ================================================================

    def test_wallet_is_lowercased(self):
        user = User(wallet_address=WALLET)

        assert user.wallet_address == WALLET.lower()
        assert user.preferences.currency == Currency.USD
        assert user.sessions == []

    def test_rejects_invalid_wallet(self):
        with pytest.raises(ValueError):
            User(wallet_address="not-a-wallet")

    # ================================================================
    # Sessions
    # ================================================================

    def test_add_session_evicts_oldest_beyond_bound(self):
        user = User(wallet_address=WALLET)
        for i in range(5):
            user.add_session(self._session(f"token-{i}", age_minutes=10 - i), 5)

        evicted = user.add_session(self._session("token-new"), 5)

        assert len(user.sessions) == 5
        assert [s.token_hash for s in evicted] == [Session.hash_token("token-0")]
        assert user.find_session(Session.hash_token("token-0")) is None
        assert user.find_session(Session.hash_token("token-new")) is not None

    def test_remove_session(self):
        user = User(wallet_address=WALLET)
        user.add_session(self._session("a"), 5)
        user.add_session(self._session("b"), 5)

        assert user.remove_session(Session.hash_token("a")) is True
        assert user.remove_session(Session.hash_token("a")) is False
        assert len(user.sessions) == 1

    def test_session_expiry_boundary(self):
        session = self._session("x")

        assert session.is_expired(session.expires_at - timedelta(seconds=1)) is False
        assert session.is_expired(session.expires_at) is True

    def test_token_hash_is_sha256_hex(self):
        digest = Session.hash_token("abc")

        assert len(digest) == 64
        assert digest != "abc"

    # ================================================================
    # Profile
    # ================================================================

    def test_update_profile_merges_preferences(self):
        user = User(wallet_address=WALLET)

        user.update_profile(
            email=" Alice@Example.COM ",
            username="alice_eth",
            preferences={"currency": "EUR", "notifications": {"push": False}},
        )

        assert user.email == "alice@example.com"
        assert user.username == "alice_eth"
        assert user.preferences.currency == Currency.EUR
        assert user.preferences.notify_push is False
        assert user.preferences.notify_email is True
        assert user.preferences.show_balance is False

    @pytest.mark.parametrize("username", ["ab", "has space", "x" * 31, "dash-ed"])
    def test_update_profile_rejects_bad_username(self, username):
        user = User(wallet_address=WALLET)

        with pytest.raises(ValueError):
            user.update_profile(username=username)

    def test_unknown_currency_rejected(self):
        with pytest.raises(ValueError):
            UserPreferences.from_dict({"currency": "DOGE"})

    def test_lock(self):
        user = User(wallet_address=WALLET)
        assert user.security.is_locked() is False

        user.security.lock_until = utcnow() + timedelta(minutes=5)
        assert user.security.is_locked() is True

    def test_public_dict_hides_sessions_and_security(self):
        user = User(wallet_address=WALLET)
        user.add_session(self._session("a"), 5)

        public = user.to_public_dict()

        assert "sessions" not in public
        assert "security" not in public
        assert public["preferences"]["notifications"]["email"] is True
