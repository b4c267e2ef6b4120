# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from socialauth.application.services.session_guard import session_operation
from socialauth.domain.users.repositories import RefreshTokenRepository
from socialauth.shared.logging import logger


class RevokeUserSessionsUseCase:
    def __init__(self, *, tokens: RefreshTokenRepository) -> None:
        self._tokens = tokens

    def execute(self, user_id: str) -> int:
        with session_operation("revoke_sessions"):
            revoked = self._tokens.revoke_all_for_user(user_id)
            logger.info(f"auth.sessions: revoked {revoked} refresh tokens user={user_id}")
            return revoked
