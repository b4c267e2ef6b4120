# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from socialauth.application.services.session_guard import session_operation
from socialauth.application.services.token_issuer import TokenIssuer
from socialauth.domain.users.entities import AccountStatus, TokenPair, User
from socialauth.domain.users.exceptions import EmailTakenError, UsernameTakenError
from socialauth.domain.users.repositories import PasswordHasher, UserRepository
from socialauth.infrastructure.observability import record_auth_event
from socialauth.shared.utils.clock import Clock, utcnow


class RegisterUserUseCase:
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

    def execute(
        self, email: str, password: str, username: str, display_name: str
    ) -> tuple[User, TokenPair]:
        with session_operation("register"):
            email = email.strip().lower()
            if self._users.find_by_email(email):
                raise EmailTakenError()
            if self._users.find_by_username(username):
                raise UsernameTakenError()

            now = self._clock()
            user = User(
                id="",
                email=email,
                username=username,
                display_name=display_name,
                password_hash=self._password_hasher.hash(password),
                role="user",
                status=AccountStatus.ACTIVE,
                created_at=now,
            )
            persisted = self._users.add(user)
            pair = self._issuer.issue_pair(persisted)
            record_auth_event("register", "success")
            return persisted, pair
