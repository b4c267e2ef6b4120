# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Use-case for revoking the refresh token paired with an access token."""

from __future__ import annotations

from socialauth.domain.users.repositories import RefreshTokenRepository
from socialauth.infrastructure.auth.token_codec import TokenCodec
from socialauth.infrastructure.observability import record_auth_event
from socialauth.shared.logging import logger


class LogoutUserUseCase:
    def __init__(self, *, tokens: RefreshTokenRepository, codec: TokenCodec) -> None:
        self._tokens = tokens
        self._codec = codec

    def execute(self, access_token: str) -> None:
        """Best effort: never raises, whatever state the token or store is in."""
        if not access_token:
            return
        try:
            claims = self._codec.decode_ignoring_expiry(access_token)
            if claims.token_id is None:
                logger.debug(f"auth.logout: no paired refresh token user={claims.user_id}")
                return
            revoked = self._tokens.revoke(claims.token_id)
            record_auth_event("logout", "revoked" if revoked else "noop")
            logger.info(f"auth.logout: user={claims.user_id} revoked={revoked}")
        except Exception as exc:
            record_auth_event("logout", "failed")
            logger.warning(f"auth.logout: revocation skipped ({type(exc).__name__})")
