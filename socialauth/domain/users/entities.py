# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AccountStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(slots=True, frozen=True)
class User:

    id: str
    email: str
    username: str
    display_name: str
    password_hash: str
    role: str
    status: AccountStatus
    created_at: datetime
    last_active_at: datetime | None = None

    def is_active(self) -> bool:
        return self.status is AccountStatus.ACTIVE


@dataclass(slots=True, frozen=True)
class RefreshTokenRecord:
    """Server-side half of a refresh token; the raw token is never stored."""

    id: str
    user_id: str
    token_hash: str
    expires_at: datetime
    created_at: datetime
    is_revoked: bool = False
    # Shared by every token rotated out of the same login; a login starts one.
    family_id: str | None = None

    @property
    def family(self) -> str:
        return self.family_id or self.id

    def is_valid(self, now: datetime) -> bool:
        return not self.is_revoked and now < self.expires_at


@dataclass(slots=True, frozen=True)
class ClaimSet:

    user_id: str
    email: str
    role: str
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    # Refresh tokens always carry it; access tokens carry the id of the
    # refresh token minted alongside them.
    token_id: str | None = None


@dataclass(slots=True, frozen=True)
class TokenPair:

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"

    def to_dict(self) -> dict[str, object]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
            "expires_in": self.expires_in,
        }
