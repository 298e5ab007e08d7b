"""
Integration tests for UserRepository.

Usage:
    pytest tests/integration/database/test_user_repository.py
"""

from datetime import timedelta

import pytest

from coffre.domain.clock import utcnow
from coffre.domain.entities.user import Currency, Session, User
from coffre.domain.exceptions import DuplicateEntityError, EntityNotFoundError
from coffre.infrastructure.persistence.repositories import UserRepository

WALLET = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
OTHER_WALLET = "0x8ba1f109551bd432803012645ac136ddd64dba72"


def new_session(token: str) -> Session:
    now = utcnow()
    return Session(
        token_hash=Session.hash_token(token),
        created_at=now,
        expires_at=now + timedelta(hours=24),
        ip_address="127.0.0.1",
    )


class TestUserRepository:
    """Integration tests for UserRepository."""

    async def test_create_and_get(self, test_db):
        async with test_db.session() as session:
            created = await UserRepository(session).create(
                User(wallet_address=WALLET.upper().replace("0X", "0x"))
            )

        async with test_db.session() as session:
            repository = UserRepository(session)
            by_id = await repository.get_by_id(created.id)
            by_wallet = await repository.get_by_wallet(WALLET.upper())

        assert by_id.wallet_address == WALLET
        assert by_wallet.id == created.id
        assert by_id.preferences.currency == Currency.USD

    async def test_missing_user(self, db_session):
        repository = UserRepository(db_session)

        assert await repository.get_by_wallet(OTHER_WALLET) is None

    async def test_duplicate_wallet(self, test_db):
        async with test_db.session() as session:
            await UserRepository(session).create(User(wallet_address=WALLET))

        with pytest.raises(DuplicateEntityError):
            async with test_db.session() as session:
                await UserRepository(session).create(User(wallet_address=WALLET))

    async def test_update_profile_and_preferences(self, test_db):
        async with test_db.session() as session:
            user = await UserRepository(session).create(User(wallet_address=WALLET))

        user.update_profile(
            email="ada@example.com",
            bio="Analyst",
            preferences={"currency": "GBP", "notifications": {"email": False}},
        )
        async with test_db.session() as session:
            await UserRepository(session).update(user)

        async with test_db.session() as session:
            stored = await UserRepository(session).get_by_id(user.id)

        assert stored.email == "ada@example.com"
        assert stored.profile.bio == "Analyst"
        assert stored.preferences.currency == Currency.GBP
        assert stored.preferences.notify_email is False

    async def test_duplicate_email_on_update(self, test_db):
        async with test_db.session() as session:
            repository = UserRepository(session)
            first = await repository.create(User(wallet_address=WALLET))
            second = await repository.create(User(wallet_address=OTHER_WALLET))

        first.update_profile(email="same@example.com")
        second.update_profile(email="same@example.com")
        async with test_db.session() as session:
            await UserRepository(session).update(first)

        with pytest.raises(DuplicateEntityError):
            async with test_db.session() as session:
                await UserRepository(session).update(second)

    async def test_session_rows_are_synchronized(self, test_db):
        async with test_db.session() as session:
            user = await UserRepository(session).create(User(wallet_address=WALLET))

        user.add_session(new_session("a"), 5)
        user.add_session(new_session("b"), 5)
        async with test_db.session() as session:
            await UserRepository(session).update(user)

        user.remove_session(Session.hash_token("a"))
        user.add_session(new_session("c"), 5)
        async with test_db.session() as session:
            await UserRepository(session).update(user)

        async with test_db.session() as session:
            stored = await UserRepository(session).get_by_wallet(WALLET)

        hashes = {s.token_hash for s in stored.sessions}
        assert hashes == {Session.hash_token("b"), Session.hash_token("c")}
        assert stored.sessions[0].ip_address == "127.0.0.1"

    async def test_update_missing_user(self, db_session):
        with pytest.raises(EntityNotFoundError):
            await UserRepository(db_session).update(User(wallet_address=WALLET))
