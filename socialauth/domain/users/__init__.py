# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import AccountStatus, ClaimSet, RefreshTokenRecord, TokenPair, TokenType, User
from .exceptions import (
    AccountInactiveError,
    EmailTakenError,
    InvalidCredentialsError,
    InvalidTokenTypeError,
    SessionOperationFailedError,
    TokenExpiredError,
    TokenInvalidError,
    TokenRevokedError,
    UsernameTakenError,
)

__all__ = [
    "AccountInactiveError",
    "AccountStatus",
    "ClaimSet",
    "EmailTakenError",
    "InvalidCredentialsError",
    "InvalidTokenTypeError",
    "RefreshTokenRecord",
    "SessionOperationFailedError",
    "TokenExpiredError",
    "TokenInvalidError",
    "TokenPair",
    "TokenRevokedError",
    "TokenType",
    "User",
    "UsernameTakenError",
]
