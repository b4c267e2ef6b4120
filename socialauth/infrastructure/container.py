# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

from redis import Redis

from socialauth.application.services.password_hashing import WerkzeugPasswordHasher
from socialauth.application.services.token_issuer import TokenIssuer
from socialauth.application.use_cases.users.authenticate import AuthenticateUseCase
from socialauth.application.use_cases.users.change_password import ChangePasswordUseCase
from socialauth.application.use_cases.users.cleanup_expired_tokens import (
    CleanupExpiredTokensUseCase,
)
from socialauth.application.use_cases.users.login_user import LoginUserUseCase
from socialauth.application.use_cases.users.logout_user import LogoutUserUseCase
from socialauth.application.use_cases.users.refresh_tokens import RefreshTokensUseCase
from socialauth.application.use_cases.users.register_user import RegisterUserUseCase
from socialauth.application.use_cases.users.revoke_sessions import RevokeUserSessionsUseCase
from socialauth.infrastructure.auth.token_codec import TokenCodec
from socialauth.infrastructure.rate_limit import SlidingWindowRateLimiter, create_redis_client
from socialauth.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyRefreshTokenRepository,
    SqlAlchemyUserRepository,
)
from socialauth.interfaces.http.controllers.auth_controller import AuthController
from socialauth.interfaces.http.controllers.misc_controller import MiscController
from socialauth.shared.config import AppConfig, load_config


class Container:
    def __init__(
        self, *, config: AppConfig | None = None, redis_client: Redis | None = None
    ) -> None:
        self._config = config
        self._redis_client = redis_client

    @cached_property
    def config(self) -> AppConfig:
        return self._config or load_config()

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher()

    @cached_property
    def token_codec(self) -> TokenCodec:
        tokens = self.config.tokens
        return TokenCodec(
            tokens.secret,
            algorithm=tokens.algorithm,
            access_ttl=tokens.access_ttl_seconds,
            refresh_ttl=tokens.refresh_ttl_seconds,
        )

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository()

    @cached_property
    def refresh_token_repository(self) -> SqlAlchemyRefreshTokenRepository:
        return SqlAlchemyRefreshTokenRepository()

    @cached_property
    def token_issuer(self) -> TokenIssuer:
        return TokenIssuer(codec=self.token_codec, tokens=self.refresh_token_repository)

    # Use cases

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            issuer=self.token_issuer,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            issuer=self.token_issuer,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def refresh_tokens_use_case(self) -> RefreshTokensUseCase:
        return RefreshTokensUseCase(
            users=self.user_repository,
            tokens=self.refresh_token_repository,
            codec=self.token_codec,
            issuer=self.token_issuer,
        )

    @cached_property
    def logout_user_use_case(self) -> LogoutUserUseCase:
        return LogoutUserUseCase(tokens=self.refresh_token_repository, codec=self.token_codec)

    @cached_property
    def change_password_use_case(self) -> ChangePasswordUseCase:
        return ChangePasswordUseCase(
            users=self.user_repository,
            tokens=self.refresh_token_repository,
            issuer=self.token_issuer,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def revoke_sessions_use_case(self) -> RevokeUserSessionsUseCase:
        return RevokeUserSessionsUseCase(tokens=self.refresh_token_repository)

    @cached_property
    def cleanup_expired_tokens_use_case(self) -> CleanupExpiredTokensUseCase:
        return CleanupExpiredTokensUseCase(tokens=self.refresh_token_repository)

    @cached_property
    def authenticate_use_case(self) -> AuthenticateUseCase:
        return AuthenticateUseCase(codec=self.token_codec)

    # Rate limiting

    @cached_property
    def redis_client(self) -> Redis:
        return self._redis_client or create_redis_client(self.config)

    @cached_property
    def rate_limiter(self) -> SlidingWindowRateLimiter:
        return SlidingWindowRateLimiter(
            self.redis_client, key_prefix=self.config.redis.key_prefix
        )

    # Controllers

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            refresh_use_case=self.refresh_tokens_use_case,
            logout_use_case=self.logout_user_use_case,
            change_password_use_case=self.change_password_use_case,
            revoke_sessions_use_case=self.revoke_sessions_use_case,
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController(redis_client=self.redis_client)


container = Container()
