# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from socialauth.application.services.session_guard import session_operation
from socialauth.domain.users.repositories import RefreshTokenRepository
from socialauth.shared.logging import logger
from socialauth.shared.utils.clock import Clock, utcnow


class CleanupExpiredTokensUseCase:
    def __init__(self, *, tokens: RefreshTokenRepository, clock: Clock = utcnow) -> None:
        self._tokens = tokens
        self._clock = clock

    def execute(self) -> int:
        with session_operation("cleanup"):
            deleted = self._tokens.delete_expired(self._clock())
            logger.info(f"tokens.cleanup: deleted {deleted} expired refresh tokens")
            return deleted
