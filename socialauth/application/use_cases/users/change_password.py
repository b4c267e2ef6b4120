# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from socialauth.application.services.session_guard import session_operation
from socialauth.application.services.token_issuer import TokenIssuer
from socialauth.domain.users.entities import TokenPair
from socialauth.domain.users.exceptions import AccountInactiveError, InvalidCredentialsError
from socialauth.domain.users.repositories import (
    PasswordHasher,
    RefreshTokenRepository,
    UserRepository,
)
from socialauth.infrastructure.observability import record_auth_event
from socialauth.shared.logging import logger


class ChangePasswordUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: RefreshTokenRepository,
        issuer: TokenIssuer,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._issuer = issuer
        self._password_hasher = password_hasher

    def execute(self, user_id: str, current_password: str, new_password: str) -> TokenPair:
        with session_operation("change_password"):
            user = self._users.find_by_id(user_id)
            if user is None or not self._password_hasher.verify(
                current_password, user.password_hash
            ):
                raise InvalidCredentialsError()
            if not user.is_active():
                raise AccountInactiveError(context={"status": user.status.value})

            self._users.update_password(user.id, self._password_hasher.hash(new_password))
            revoked = self._tokens.revoke_all_for_user(user.id)
            logger.info(f"auth.password: changed user={user.id} revoked_sessions={revoked}")
            record_auth_event("change_password", "success")
            return self._issuer.issue_pair(user)
