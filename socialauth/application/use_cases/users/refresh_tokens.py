# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Single-use refresh token rotation.

The presented token is revoked before a replacement pair is issued. The
conditional revoke lets exactly one of several concurrent callers win; every
other caller gets ``TokenRevokedError``. Presenting a token whose record was
already revoked is treated as theft: every token rotated out of the same login
(its family) is revoked. Sessions started by other logins are left alone.
"""

from __future__ import annotations

import hmac

from socialauth.application.services.session_guard import session_operation
from socialauth.application.services.token_issuer import TokenIssuer
from socialauth.domain.users.entities import RefreshTokenRecord, TokenPair, TokenType
from socialauth.domain.users.exceptions import (
    AccountInactiveError,
    InvalidTokenTypeError,
    TokenRevokedError,
)
from socialauth.domain.users.repositories import RefreshTokenRepository, UserRepository
from socialauth.infrastructure.audit import AuditAction, audit_log
from socialauth.infrastructure.auth.token_codec import TokenCodec
from socialauth.infrastructure.observability import record_auth_event
from socialauth.shared.logging import logger
from socialauth.shared.utils.clock import Clock, utcnow


class RefreshTokensUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: RefreshTokenRepository,
        codec: TokenCodec,
        issuer: TokenIssuer,
        clock: Clock = utcnow,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._codec = codec
        self._issuer = issuer
        self._clock = clock

    def execute(self, refresh_token: str) -> TokenPair:
        with session_operation("refresh"):
            claims = self._codec.verify(refresh_token)
            if claims.token_type is not TokenType.REFRESH or claims.token_id is None:
                raise InvalidTokenTypeError()

            record = self._tokens.find(claims.token_id)
            token_hash = self._codec.hash_for_storage(refresh_token)
            if (
                record is None
                or record.user_id != claims.user_id
                or not hmac.compare_digest(record.token_hash, token_hash)
            ):
                record_auth_event("refresh", "unknown")
                raise TokenRevokedError()

            if record.is_revoked:
                self._handle_reuse(record)
                raise TokenRevokedError()

            if not self._tokens.revoke_if_valid(record.id, self._clock()):
                # Expired, or a concurrent refresh with the same token won.
                record_auth_event("refresh", "rejected")
                raise TokenRevokedError()

            user = self._users.find_by_id(record.user_id)
            if user is None:
                raise TokenRevokedError()
            if not user.is_active():
                raise AccountInactiveError(context={"status": user.status.value})

            pair = self._issuer.issue_pair(user, family_id=record.family)
            record_auth_event("refresh", "success")
            logger.info(f"auth.refresh: rotated tid={record.id[:8]}… user={user.id}")
            return pair

    def _handle_reuse(self, record: RefreshTokenRecord) -> None:
        revoked = self._tokens.revoke_family(record.family)
        record_auth_event("refresh", "reuse_detected")
        logger.warning(
            f"auth.refresh: SECURITY revoked refresh token replayed "
            f"user={record.user_id} tid={record.id[:8]}… "
            f"family={record.family[:8]}… revoked={revoked}"
        )
        audit_log(
            AuditAction.REFRESH_TOKEN_REUSE,
            user_id=record.user_id,
            details={"family": record.family, "revoked_sessions": revoked},
            success=False,
        )
