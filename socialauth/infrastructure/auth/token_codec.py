# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Signed access/refresh claim-sets.

Tokens are compact HS256 JWTs. Verification is pure: it only raises
``TokenExpiredError`` or ``TokenInvalidError``. Expiry is checked against the
injected clock with no leeway, so a token is valid while ``now < exp``.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import UTC, datetime
from typing import Any

import jwt

from socialauth.domain.users.entities import ClaimSet, TokenType
from socialauth.domain.users.exceptions import TokenExpiredError, TokenInvalidError
from socialauth.shared.utils.clock import Clock, utcnow

ACCESS_TOKEN_TTL = 15 * 60
REFRESH_TOKEN_TTL = 7 * 24 * 60 * 60

_REQUIRED_CLAIMS = ("sub", "email", "role", "type", "iat", "exp")


class TokenCodec:
    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        access_ttl: int = ACCESS_TOKEN_TTL,
        refresh_ttl: int = REFRESH_TOKEN_TTL,
        clock: Clock = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._clock = clock

    @property
    def access_ttl(self) -> int:
        return self._access_ttl

    @property
    def refresh_ttl(self) -> int:
        return self._refresh_ttl

    def issue_access(
        self, user_id: str, email: str, role: str, *, token_id: str | None = None
    ) -> str:
        extra = {"tid": token_id} if token_id else {}
        return self._encode(user_id, email, role, TokenType.ACCESS, self._access_ttl, extra)

    def issue_refresh(self, user_id: str, email: str, role: str) -> tuple[str, str]:
        token_id = secrets.token_urlsafe(32)
        token = self._encode(
            user_id, email, role, TokenType.REFRESH, self._refresh_ttl, {"tid": token_id}
        )
        return token, token_id

    def verify(self, token: str) -> ClaimSet:
        claims = self._decode(token)
        if self._clock().timestamp() >= claims["exp"]:
            raise TokenExpiredError()
        return self._to_claim_set(claims)

    def decode_ignoring_expiry(self, token: str) -> ClaimSet:
        """Signature and structure are still enforced; only ``exp`` is skipped."""
        return self._to_claim_set(self._decode(token))

    @staticmethod
    def hash_for_storage(token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def _encode(
        self,
        user_id: str,
        email: str,
        role: str,
        token_type: TokenType,
        ttl: int,
        extra: dict[str, Any],
    ) -> str:
        issued_at = int(self._clock().timestamp())
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "type": token_type.value,
            "iat": issued_at,
            "exp": issued_at + ttl,
            **extra,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def _decode(self, token: str) -> dict[str, Any]:
        if not isinstance(token, str) or not token:
            raise TokenInvalidError()
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "require": list(_REQUIRED_CLAIMS),
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError() from exc
        if not isinstance(claims.get("exp"), int) or not isinstance(claims.get("iat"), int):
            raise TokenInvalidError()
        return claims

    @staticmethod
    def _to_claim_set(claims: dict[str, Any]) -> ClaimSet:
        try:
            token_type = TokenType(claims["type"])
        except ValueError as exc:
            raise TokenInvalidError() from exc

        for name in ("sub", "email", "role"):
            if not isinstance(claims.get(name), str) or not claims[name]:
                raise TokenInvalidError()

        token_id = claims.get("tid")
        if token_id is not None and not isinstance(token_id, str):
            raise TokenInvalidError()
        if token_type is TokenType.REFRESH and not token_id:
            raise TokenInvalidError()

        return ClaimSet(
            user_id=claims["sub"],
            email=claims["email"],
            role=claims["role"],
            token_type=token_type,
            issued_at=datetime.fromtimestamp(claims["iat"], UTC),
            expires_at=datetime.fromtimestamp(claims["exp"], UTC),
            token_id=token_id,
        )


__all__ = ["ACCESS_TOKEN_TTL", "REFRESH_TOKEN_TTL", "TokenCodec"]
