# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from socialauth.domain.users.entities import TokenPair, User
from socialauth.shared.errors.validation_types import ValidationErrorType

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[a-zA-Z]{2,}$")
_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")


def _validate_email(value: str) -> str:
    value = value.strip().lower()
    if not _EMAIL_RE.match(value):
        raise PydanticCustomError(
            ValidationErrorType.EMAIL_INVALID,
            "Email address is not valid",
            {},
        )
    return value


def _validate_password_strength(value: str) -> str:
    if len(value) < 8:
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_TOO_SHORT,
            "Password must be at least 8 characters long",
            {"min_length": 8},
        )

    if not re.search(r"[a-z]", value):
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_NO_LOWERCASE,
            "Password must contain at least one lowercase letter",
            {},
        )

    if not re.search(r"[A-Z]", value):
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_NO_UPPERCASE,
            "Password must contain at least one uppercase letter",
            {},
        )

    if not re.search(r"\d", value):
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_NO_DIGIT,
            "Password must contain at least one number",
            {},
        )

    if not re.search(r"[^a-zA-Z0-9]", value):
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_NO_SPECIAL,
            "Password must contain at least one special character",
            {},
        )

    return value


class RegisterRequestDTO(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)
    username: str = Field(min_length=3, max_length=50)
    display_name: str = Field(min_length=1, max_length=100)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _validate_email(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _validate_password_strength(value)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        if not _USERNAME_RE.match(value):
            raise PydanticCustomError(
                ValidationErrorType.USERNAME_INVALID_CHARS,
                "Username must contain only ASCII letters, digits and underscores",
                {"pattern": _USERNAME_RE.pattern},
            )
        return value

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError(
                ValidationErrorType.DISPLAY_NAME_BLANK,
                "Display name cannot be blank",
                {},
            )
        return value


class LoginRequestDTO(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)  # No strength check on login

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _validate_email(value)


class RefreshRequestDTO(BaseModel):
    refresh_token: str = Field(min_length=1, max_length=4096)


class ChangePasswordRequestDTO(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=1, max_length=128)

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        return _validate_password_strength(value)

    @model_validator(mode="after")
    def _passwords_differ(self) -> "ChangePasswordRequestDTO":
        if self.current_password == self.new_password:
            raise PydanticCustomError(
                ValidationErrorType.PASSWORD_REUSED,
                "New password must differ from the current one",
                {},
            )
        return self


class UserDTO(BaseModel):
    id: str
    email: str
    username: str
    display_name: str
    role: str
    status: str

    @classmethod
    def from_domain(cls, user: User) -> "UserDTO":
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            display_name=user.display_name,
            role=user.role,
            status=user.status.value,
        )


class TokenPairDTO(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int

    @classmethod
    def from_domain(cls, pair: TokenPair) -> "TokenPairDTO":
        return cls.model_validate(pair.to_dict())


class AuthSuccessDTO(BaseModel):
    user: UserDTO
    tokens: TokenPairDTO


class TokensDTO(BaseModel):
    tokens: TokenPairDTO


class OkDTO(BaseModel):
    ok: bool = True
