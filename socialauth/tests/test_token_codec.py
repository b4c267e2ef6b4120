from __future__ import annotations

import jwt
import pytest

from socialauth.domain.users.entities import TokenType
from socialauth.domain.users.exceptions import TokenExpiredError, TokenInvalidError
from socialauth.infrastructure.auth.token_codec import TokenCodec
from socialauth.tests.conftest import TEST_SECRET
from socialauth.tests.fakes import MutableClock


def test_access_token_round_trip(codec: TokenCodec, clock: MutableClock) -> None:
    token = codec.issue_access("u-1", "alice@example.com", "user", token_id="tid-1")

    claims = codec.verify(token)

    assert claims.user_id == "u-1"
    assert claims.email == "alice@example.com"
    assert claims.role == "user"
    assert claims.token_type is TokenType.ACCESS
    assert claims.token_id == "tid-1"
    assert claims.issued_at == clock.now
    assert (claims.expires_at - claims.issued_at).total_seconds() == 900


def test_refresh_token_carries_unique_id(codec: TokenCodec) -> None:
    first, first_id = codec.issue_refresh("u-1", "alice@example.com", "user")
    second, second_id = codec.issue_refresh("u-1", "alice@example.com", "user")

    assert first != second
    assert first_id != second_id
    claims = codec.verify(first)
    assert claims.token_type is TokenType.REFRESH
    assert claims.token_id == first_id
    assert (claims.expires_at - claims.issued_at).total_seconds() == 7 * 24 * 3600


def test_expiry_boundary_is_exclusive(codec: TokenCodec, clock: MutableClock) -> None:
    token = codec.issue_access("u-1", "alice@example.com", "user")

    clock.advance(899)
    assert codec.verify(token).user_id == "u-1"

    clock.advance(1)
    with pytest.raises(TokenExpiredError):
        codec.verify(token)


def test_decode_ignoring_expiry_accepts_stale_token(
    codec: TokenCodec, clock: MutableClock
) -> None:
    token = codec.issue_access("u-1", "alice@example.com", "user", token_id="tid-9")
    clock.advance(3600)

    assert codec.decode_ignoring_expiry(token).token_id == "tid-9"


def test_tampered_signature_is_invalid(codec: TokenCodec) -> None:
    token = codec.issue_access("u-1", "alice@example.com", "user")
    head, payload, signature = token.split(".")
    flipped = ("A" if signature[0] != "A" else "B") + signature[1:]

    with pytest.raises(TokenInvalidError):
        codec.verify(".".join((head, payload, flipped)))


def test_token_signed_with_other_secret_is_invalid(clock: MutableClock) -> None:
    foreign = TokenCodec("another-secret-entirely-0123456789abcdef", clock=clock)
    token = foreign.issue_access("u-1", "alice@example.com", "user")

    with pytest.raises(TokenInvalidError):
        TokenCodec(TEST_SECRET, clock=clock).verify(token)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_tokens_are_invalid(codec: TokenCodec, token: str) -> None:
    with pytest.raises(TokenInvalidError):
        codec.verify(token)


def test_missing_claims_are_invalid(codec: TokenCodec, clock: MutableClock) -> None:
    now = int(clock.epoch())
    token = jwt.encode({"sub": "u-1", "iat": now, "exp": now + 60}, TEST_SECRET, algorithm="HS256")

    with pytest.raises(TokenInvalidError):
        codec.verify(token)


def test_unknown_token_type_is_invalid(codec: TokenCodec, clock: MutableClock) -> None:
    now = int(clock.epoch())
    token = jwt.encode(
        {"sub": "u-1", "email": "a@b.io", "role": "user", "type": "id", "iat": now, "exp": now + 60},
        TEST_SECRET,
        algorithm="HS256",
    )

    with pytest.raises(TokenInvalidError):
        codec.verify(token)


def test_refresh_token_without_id_is_invalid(codec: TokenCodec, clock: MutableClock) -> None:
    now = int(clock.epoch())
    token = jwt.encode(
        {"sub": "u-1", "email": "a@b.io", "role": "user", "type": "refresh", "iat": now, "exp": now + 60},
        TEST_SECRET,
        algorithm="HS256",
    )

    with pytest.raises(TokenInvalidError):
        codec.verify(token)


def test_empty_secret_is_rejected() -> None:
    with pytest.raises(ValueError):
        TokenCodec("")


def test_storage_hash_is_stable_sha256() -> None:
    digest = TokenCodec.hash_for_storage("abc")
    assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
