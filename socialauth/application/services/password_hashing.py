# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from socialauth.domain.users.repositories import PasswordHasher

PBKDF2_METHOD = "pbkdf2:sha256:600000"


class WerkzeugPasswordHasher(PasswordHasher):
    """PBKDF2 via werkzeug. Stored hashes look like ``<method>$<salt>$<digest>``."""

    def __init__(self, method: str = PBKDF2_METHOD, salt_length: int = 16) -> None:
        self._method = method
        self._salt_length = salt_length

    def hash(self, password: str) -> str:
        return generate_password_hash(password, method=self._method, salt_length=self._salt_length)

    def verify(self, password: str, hashed: str) -> bool:
        return check_password_hash(hashed, password)

    def needs_rehash(self, hashed: str) -> bool:
        # Anything minted with a different method or iteration count is upgraded
        # on the next successful login.
        method, _, _ = hashed.partition("$")
        return method != self._method
