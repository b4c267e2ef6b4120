# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import TypeVar

from flask import Blueprint, Response, g, jsonify, request
from pydantic import BaseModel, ValidationError

from socialauth.application.use_cases.users.change_password import ChangePasswordUseCase
from socialauth.application.use_cases.users.login_user import LoginUserUseCase
from socialauth.application.use_cases.users.logout_user import LogoutUserUseCase
from socialauth.application.use_cases.users.refresh_tokens import RefreshTokensUseCase
from socialauth.application.use_cases.users.register_user import RegisterUserUseCase
from socialauth.application.use_cases.users.revoke_sessions import RevokeUserSessionsUseCase
from socialauth.infrastructure.audit import AuditAction, audit_log
from socialauth.interfaces.http.auth import bearer_token, current_claims, require_auth
from socialauth.interfaces.http.dto.auth import (
    AuthSuccessDTO,
    ChangePasswordRequestDTO,
    LoginRequestDTO,
    OkDTO,
    RefreshRequestDTO,
    RegisterRequestDTO,
    TokenPairDTO,
    TokensDTO,
    UserDTO,
)
from socialauth.shared.errors.base import AppError, UnauthorizedError
from socialauth.shared.errors.validation import raise_validation_error
from socialauth.shared.logging import logger
from socialauth.shared.middleware.proxy import client_ip
from socialauth.shared.middleware.rate_limit import rate_limit


T = TypeVar("T", bound=BaseModel)


def _parse(dto_cls: type[T]) -> T:
    try:
        return dto_cls.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        raise_validation_error(exc)


class AuthController:
    def __init__(
        self,
        *,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        refresh_use_case: RefreshTokensUseCase,
        logout_use_case: LogoutUserUseCase,
        change_password_use_case: ChangePasswordUseCase,
        revoke_sessions_use_case: RevokeUserSessionsUseCase,
    ) -> None:
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._refresh_use_case = refresh_use_case
        self._logout_use_case = logout_use_case
        self._change_password_use_case = change_password_use_case
        self._revoke_sessions_use_case = revoke_sessions_use_case

    @rate_limit("auth.register")
    def register(self) -> tuple[Response, int]:
        dto = _parse(RegisterRequestDTO)

        user, pair = self._register_use_case.execute(
            dto.email, dto.password, dto.username, dto.display_name
        )

        audit_log(
            AuditAction.REGISTER,
            user_id=user.id,
            ip_address=client_ip(),
            details={"username": user.username},
            success=True,
        )

        payload = AuthSuccessDTO(
            user=UserDTO.from_domain(user), tokens=TokenPairDTO.from_domain(pair)
        ).model_dump()
        logger.info(f"auth.register: ok user_id={user.id}")
        return jsonify(payload), 201

    @rate_limit("auth.login")
    def login(self) -> tuple[Response, int]:
        dto = _parse(LoginRequestDTO)
        ip_address = client_ip()

        try:
            user, pair = self._login_use_case.execute(dto.email, dto.password, ip_address)
        except AppError as exc:
            audit_log(
                AuditAction.LOGIN_FAILED,
                user_id=None,
                ip_address=ip_address,
                details={"error": exc.code},
                success=False,
            )
            raise

        audit_log(
            AuditAction.LOGIN_SUCCESS,
            user_id=user.id,
            ip_address=ip_address,
            details={},
            success=True,
        )

        payload = AuthSuccessDTO(
            user=UserDTO.from_domain(user), tokens=TokenPairDTO.from_domain(pair)
        ).model_dump()
        logger.info(f"auth.login: ok user_id={user.id}")
        return jsonify(payload), 200

    @rate_limit("auth.refresh")
    def refresh(self) -> tuple[Response, int]:
        dto = _parse(RefreshRequestDTO)
        pair = self._refresh_use_case.execute(dto.refresh_token)

        audit_log(
            AuditAction.TOKEN_REFRESHED,
            user_id=None,
            ip_address=client_ip(),
            details={},
            success=True,
        )
        return jsonify(TokensDTO(tokens=TokenPairDTO.from_domain(pair)).model_dump()), 200

    def logout(self) -> tuple[Response, int]:
        # Expired access tokens are accepted here; only presence is required.
        token = bearer_token()
        if not token:
            raise UnauthorizedError()

        self._logout_use_case.execute(token)

        audit_log(
            AuditAction.LOGOUT,
            user_id=None,
            ip_address=client_ip(),
            details={},
            success=True,
        )
        logger.info("auth.logout: ok")
        return jsonify(OkDTO().model_dump()), 200

    @require_auth
    @rate_limit("read.standard")
    def me(self) -> tuple[Response, int]:
        claims = current_claims()
        return (
            jsonify(
                {
                    "user_id": claims.user_id,
                    "email": claims.email,
                    "role": claims.role,
                    "expires_at": claims.expires_at.isoformat(),
                }
            ),
            200,
        )

    @require_auth
    @rate_limit("auth.change_password")
    def change_password(self) -> tuple[Response, int]:
        dto = _parse(ChangePasswordRequestDTO)
        pair = self._change_password_use_case.execute(
            g.user_id, dto.current_password, dto.new_password
        )

        audit_log(
            AuditAction.PASSWORD_CHANGED,
            user_id=g.user_id,
            ip_address=client_ip(),
            details={},
            success=True,
        )
        return jsonify(TokensDTO(tokens=TokenPairDTO.from_domain(pair)).model_dump()), 200

    @require_auth
    def revoke_sessions(self) -> tuple[Response, int]:
        revoked = self._revoke_sessions_use_case.execute(g.user_id)

        audit_log(
            AuditAction.SESSIONS_REVOKED,
            user_id=g.user_id,
            ip_address=client_ip(),
            details={"revoked": revoked},
            success=True,
        )
        return jsonify({"revoked": revoked}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/refresh", view_func=self.refresh, methods=["POST"])
        bp.add_url_rule("/logout", view_func=self.logout, methods=["POST"])
        bp.add_url_rule("/me", view_func=self.me, methods=["GET"])
        bp.add_url_rule("/password", view_func=self.change_password, methods=["POST"])
        bp.add_url_rule(
            "/sessions/revoke", view_func=self.revoke_sessions, methods=["POST"]
        )
        return bp
