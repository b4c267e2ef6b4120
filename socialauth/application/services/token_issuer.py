# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta

from socialauth.domain.users.entities import RefreshTokenRecord, TokenPair, User
from socialauth.domain.users.repositories import RefreshTokenRepository
from socialauth.infrastructure.auth.token_codec import TokenCodec
from socialauth.shared.logging import logger
from socialauth.shared.utils.clock import Clock, utcnow


class TokenIssuer:
    """Mints an access/refresh pair and persists the refresh half."""

    def __init__(
        self,
        *,
        codec: TokenCodec,
        tokens: RefreshTokenRepository,
        clock: Clock = utcnow,
    ) -> None:
        self._codec = codec
        self._tokens = tokens
        self._clock = clock

    def issue_pair(self, user: User, *, family_id: str | None = None) -> TokenPair:
        """Pass the presented token's family when rotating; omit it for a new login."""
        now = self._clock()
        refresh_token, token_id = self._codec.issue_refresh(user.id, user.email, user.role)
        self._tokens.add(
            RefreshTokenRecord(
                id=token_id,
                user_id=user.id,
                token_hash=self._codec.hash_for_storage(refresh_token),
                expires_at=now + timedelta(seconds=self._codec.refresh_ttl),
                created_at=now,
                family_id=family_id or token_id,
            )
        )
        access_token = self._codec.issue_access(
            user.id, user.email, user.role, token_id=token_id
        )
        logger.debug(f"tokens.issue: user={user.id} tid={token_id[:8]}…")
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self._codec.access_ttl,
        )


__all__ = ["TokenIssuer"]
