# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations


class ValidationErrorType:
    MISSING = "missing"
    EMAIL_INVALID = "email_invalid"
    USERNAME_INVALID_CHARS = "username_invalid_chars"
    DISPLAY_NAME_BLANK = "display_name_blank"
    PASSWORD_TOO_SHORT = "password_too_short"
    PASSWORD_NO_UPPERCASE = "password_no_uppercase"
    PASSWORD_NO_LOWERCASE = "password_no_lowercase"
    PASSWORD_NO_DIGIT = "password_no_digit"
    PASSWORD_NO_SPECIAL = "password_no_special"
    PASSWORD_REUSED = "password_reused"


__all__ = ["ValidationErrorType"]
