from __future__ import annotations

import os
import tempfile
from pathlib import Path

_TMP_DIR = Path(tempfile.mkdtemp(prefix="socialauth-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP_DIR / 'test.db'}")
os.environ.setdefault("JWT_SECRET", "test-signing-secret-with-plenty-of-entropy-0123456789")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("ENABLE_RATE_LIMIT", "true")

import pytest  # noqa: E402

from socialauth.application.services.token_issuer import TokenIssuer  # noqa: E402
from socialauth.infrastructure.auth.token_codec import TokenCodec  # noqa: E402
from socialauth.infrastructure.db import ENGINE, Base, init_db  # noqa: E402
from socialauth.tests.fakes import (  # noqa: E402
    FakeRedis,
    InMemoryRefreshTokenRepository,
    InMemoryUserRepository,
    MutableClock,
    PlainHasher,
)

TEST_SECRET = os.environ["JWT_SECRET"]


@pytest.fixture(scope="session", autouse=True)
def _schema() -> None:
    init_db()


@pytest.fixture()
def reset_database():
    Base.metadata.drop_all(bind=ENGINE)
    Base.metadata.create_all(bind=ENGINE)
    yield
    Base.metadata.drop_all(bind=ENGINE)
    Base.metadata.create_all(bind=ENGINE)


@pytest.fixture()
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture()
def codec(clock: MutableClock) -> TokenCodec:
    return TokenCodec(TEST_SECRET, clock=clock)


@pytest.fixture()
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def tokens() -> InMemoryRefreshTokenRepository:
    return InMemoryRefreshTokenRepository()


@pytest.fixture()
def hasher() -> PlainHasher:
    return PlainHasher()


@pytest.fixture()
def issuer(
    codec: TokenCodec, tokens: InMemoryRefreshTokenRepository, clock: MutableClock
) -> TokenIssuer:
    return TokenIssuer(codec=codec, tokens=tokens, clock=clock)


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()
