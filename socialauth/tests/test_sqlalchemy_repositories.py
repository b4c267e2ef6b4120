from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from socialauth.application.use_cases.users.register_user import RegisterUserUseCase
from socialauth.domain.users.entities import AccountStatus, RefreshTokenRecord, User
from socialauth.domain.users.exceptions import EmailTakenError, UsernameTakenError
from socialauth.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyRefreshTokenRepository,
    SqlAlchemyUserRepository,
)

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture()
def user(reset_database) -> User:
    return SqlAlchemyUserRepository().add(
        User(
            id="",
            email="Alice@Example.com",
            username="alice",
            display_name="Alice",
            password_hash="hash",
            role="user",
            status=AccountStatus.ACTIVE,
            created_at=NOW,
        )
    )


def _record(
    user: User, token_id: str, *, expires_in: int = 3600, family: str | None = None
) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=token_id,
        family_id=family,
        user_id=user.id,
        token_hash=f"hash-{token_id}",
        expires_at=NOW + timedelta(seconds=expires_in),
        created_at=NOW,
    )


def test_user_round_trip(user: User) -> None:
    repo = SqlAlchemyUserRepository()

    assert user.id
    assert repo.find_by_email("ALICE@example.com") == user
    assert repo.find_by_username("alice") == user
    assert repo.find_by_id("missing") is None

    repo.set_status(user.id, AccountStatus.SUSPENDED)
    repo.update_password(user.id, "new-hash")
    repo.touch_last_active(user.id, NOW)

    stored = repo.find_by_id(user.id)
    assert stored.status is AccountStatus.SUSPENDED
    assert stored.password_hash == "new-hash"
    assert stored.last_active_at == NOW


def test_conditional_revoke_wins_once(user: User) -> None:
    tokens = SqlAlchemyRefreshTokenRepository()
    tokens.add(_record(user, "t1"))

    assert tokens.revoke_if_valid("t1", NOW) is True
    assert tokens.revoke_if_valid("t1", NOW) is False
    assert tokens.find("t1").is_revoked


def test_conditional_revoke_refuses_expired(user: User) -> None:
    tokens = SqlAlchemyRefreshTokenRepository()
    tokens.add(_record(user, "t1", expires_in=60))

    assert tokens.revoke_if_valid("t1", NOW + timedelta(seconds=60)) is False
    assert tokens.find("t1").is_revoked is False


def test_revoke_all_and_cleanup(user: User) -> None:
    tokens = SqlAlchemyRefreshTokenRepository()
    tokens.add(_record(user, "t1"))
    tokens.add(_record(user, "t2"))
    tokens.add(_record(user, "t3", expires_in=10))

    assert tokens.revoke("t1") is True
    assert tokens.revoke("t1") is False
    assert tokens.revoke_all_for_user(user.id) == 2
    assert tokens.delete_expired(NOW + timedelta(seconds=10)) == 1
    assert tokens.find("t3") is None
    assert tokens.find("t2").expires_at == NOW + timedelta(seconds=3600)


def test_revoke_family_leaves_other_logins(user: User) -> None:
    tokens = SqlAlchemyRefreshTokenRepository()
    tokens.add(_record(user, "t1"))
    tokens.add(_record(user, "t2", family="t1"))
    tokens.add(_record(user, "t3"))

    assert tokens.find("t1").family == "t1"
    assert tokens.revoke_family("t1") == 2
    assert tokens.find("t2").is_revoked
    assert tokens.find("t3").is_revoked is False


def _duplicate(**changes) -> User:
    return replace(
        User(
            id="",
            email="alice@example.com",
            username="alice",
            display_name="Alice Again",
            password_hash="hash",
            role="user",
            status=AccountStatus.ACTIVE,
            created_at=NOW,
        ),
        **changes,
    )


def test_insert_colliding_on_email_raises_email_taken(user: User) -> None:
    with pytest.raises(EmailTakenError):
        SqlAlchemyUserRepository().add(_duplicate(username="alice2"))


def test_insert_colliding_on_username_raises_username_taken(user: User) -> None:
    with pytest.raises(UsernameTakenError):
        SqlAlchemyUserRepository().add(_duplicate(email="other@example.com"))


def test_register_losing_the_uniqueness_race_reports_conflict(user: User, issuer, hasher) -> None:
    repo = SqlAlchemyUserRepository()
    # The pre-insert lookups miss, as they would for a concurrent registration.
    repo.find_by_email = lambda email: None  # type: ignore[method-assign]
    repo.find_by_username = lambda username: None  # type: ignore[method-assign]
    register = RegisterUserUseCase(users=repo, issuer=issuer, password_hasher=hasher)

    with pytest.raises(EmailTakenError):
        register.execute("ALICE@example.com", "Sup3r$ecret", "alice2", "Alice Two")
    with pytest.raises(UsernameTakenError):
        register.execute("other@example.com", "Sup3r$ecret", "alice", "Alice Two")
