# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import replace

from socialauth.application.services.session_guard import session_operation
from socialauth.application.services.token_issuer import TokenIssuer
from socialauth.domain.users.entities import TokenPair, User
from socialauth.domain.users.exceptions import AccountInactiveError, InvalidCredentialsError
from socialauth.domain.users.repositories import PasswordHasher, UserRepository
from socialauth.infrastructure.observability import record_auth_event
from socialauth.shared.logging import logger
from socialauth.shared.utils.clock import Clock, utcnow


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        issuer: TokenIssuer,
        password_hasher: PasswordHasher,
        clock: Clock = utcnow,
    ) -> None:
        self._users = users
        self._issuer = issuer
        self._password_hasher = password_hasher
        self._clock = clock
        # Unknown emails are verified against this so they cost the same
        # key derivation as a wrong password.
        self._dummy_hash = password_hasher.hash("socialauth-unknown-account")

    def execute(
        self, email: str, password: str, ip_address: str | None = None
    ) -> tuple[User, TokenPair]:
        with session_operation("login"):
            user = self._users.find_by_email(email.strip().lower())
            hashed = user.password_hash if user else self._dummy_hash
            password_valid = self._password_hasher.verify(password, hashed)

            if user is None or not password_valid:
                record_auth_event("login", "invalid_credentials")
                logger.info(f"auth.login: rejected credentials ip={ip_address}")
                raise InvalidCredentialsError()

            if not user.is_active():
                record_auth_event("login", "inactive")
                raise AccountInactiveError(context={"status": user.status.value})

            if self._password_hasher.needs_rehash(user.password_hash):
                self._users.update_password(user.id, self._password_hasher.hash(password))
                logger.info(f"auth.login: upgraded password hash user_id={user.id}")

            pair = self._issuer.issue_pair(user)
            now = self._clock()
            self._users.touch_last_active(user.id, now)
            record_auth_event("login", "success")
            return replace(user, last_active_at=now), pair
