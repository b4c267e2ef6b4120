# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from socialauth.domain.users.entities import ClaimSet, TokenType
from socialauth.domain.users.exceptions import InvalidTokenTypeError
from socialauth.infrastructure.auth.token_codec import TokenCodec


class AuthenticateUseCase:
    """Resolves a bearer access token to its claims. No store round-trip."""

    def __init__(self, *, codec: TokenCodec) -> None:
        self._codec = codec

    def execute(self, access_token: str) -> ClaimSet:
        claims = self._codec.verify(access_token)
        if claims.token_type is not TokenType.ACCESS:
            raise InvalidTokenTypeError()
        return claims
