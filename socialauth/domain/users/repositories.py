# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import AccountStatus, RefreshTokenRecord, User


class UserRepository(Protocol):
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_username(self, username: str) -> User | None: ...
    def find_by_id(self, user_id: str) -> User | None: ...
    def add(self, user: User) -> User: ...
    def touch_last_active(self, user_id: str, at: datetime) -> None: ...
    def update_password(self, user_id: str, password_hash: str) -> None: ...
    def set_status(self, user_id: str, status: AccountStatus) -> None: ...


class RefreshTokenRepository(Protocol):
    def add(self, record: RefreshTokenRecord) -> None: ...
    def find(self, token_id: str) -> RefreshTokenRecord | None: ...

    def revoke_if_valid(self, token_id: str, now: datetime) -> bool:
        """Flip ``is_revoked`` only if the row is unrevoked and unexpired.

        Returns True for exactly one caller per token id.
        """
        ...

    def revoke(self, token_id: str) -> bool: ...
    def revoke_family(self, family_id: str) -> int: ...
    def revoke_all_for_user(self, user_id: str) -> int: ...
    def delete_expired(self, now: datetime) -> int: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...
    def needs_rehash(self, hashed: str) -> bool: ...
