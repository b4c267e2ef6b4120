# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from socialauth.shared.errors.base import DomainError, InfrastructureError


class EmailTakenError(DomainError):
    error_code = "email_taken"
    http_status = HTTPStatus.CONFLICT


class UsernameTakenError(DomainError):
    error_code = "username_taken"
    http_status = HTTPStatus.CONFLICT


class InvalidCredentialsError(DomainError):
    error_code = "invalid_credentials"
    http_status = HTTPStatus.UNAUTHORIZED


class AccountInactiveError(DomainError):
    error_code = "account_inactive"
    http_status = HTTPStatus.FORBIDDEN


class TokenExpiredError(DomainError):
    error_code = "token_expired"
    http_status = HTTPStatus.UNAUTHORIZED


class TokenInvalidError(DomainError):
    error_code = "token_invalid"
    http_status = HTTPStatus.UNAUTHORIZED


class InvalidTokenTypeError(DomainError):
    error_code = "invalid_token_type"
    http_status = HTTPStatus.UNAUTHORIZED


class TokenRevokedError(DomainError):
    error_code = "token_revoked"
    http_status = HTTPStatus.UNAUTHORIZED


class SessionOperationFailedError(InfrastructureError):
    error_code = "session_operation_failed"
