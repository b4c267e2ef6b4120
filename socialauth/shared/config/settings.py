# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache
from typing import Annotated

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///socialauth.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = SettingsConfigDict(env_file=".env", validate_by_name=True, extra="ignore")


class RedisConfig(BaseSettings):
    url: str = Field("redis://localhost:6379/0", alias="REDIS_URL")
    socket_timeout: float = Field(2.0, gt=0, alias="REDIS_SOCKET_TIMEOUT")
    key_prefix: str = Field("ratelimit", alias="REDIS_RATE_LIMIT_PREFIX")

    model_config = SettingsConfigDict(env_file=".env", validate_by_name=True, extra="ignore")


class TokenConfig(BaseSettings):
    secret: str = Field("dev-jwt-secret", alias="JWT_SECRET")
    algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_ttl_seconds: int = Field(15 * 60, ge=1, alias="ACCESS_TOKEN_TTL")
    refresh_ttl_seconds: int = Field(7 * 24 * 60 * 60, ge=1, alias="REFRESH_TOKEN_TTL")

    model_config = SettingsConfigDict(env_file=".env", validate_by_name=True, extra="ignore")


class ObservabilityConfig(BaseSettings):
    metrics_enabled: bool = Field(True, alias="METRICS_ENABLED")
    service_name: str = Field("socialauth", alias="SERVICE_NAME")

    model_config = SettingsConfigDict(env_file=".env", validate_by_name=True, extra="ignore")


class RateLimitRuleConfig(BaseModel):
    max_requests: int = Field(gt=0)
    window_seconds: int = Field(gt=0)
    fail_closed: bool = False


def _default_rate_limit_rules() -> dict[str, RateLimitRuleConfig]:
    return {
        "auth.register": RateLimitRuleConfig(max_requests=5, window_seconds=3600),
        "auth.login": RateLimitRuleConfig(max_requests=10, window_seconds=900),
        "auth.refresh": RateLimitRuleConfig(max_requests=30, window_seconds=3600),
        "auth.change_password": RateLimitRuleConfig(max_requests=3, window_seconds=3600),
        "read.standard": RateLimitRuleConfig(max_requests=100, window_seconds=60),
    }


class SecurityConfig(BaseSettings):
    # CORS
    allowed_origins: Annotated[list[str], NoDecode] = Field(["*"], alias="ALLOWED_ORIGINS")

    # Rate limiting
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    rate_limits: dict[str, RateLimitRuleConfig] = Field(
        default_factory=_default_rate_limit_rules, alias="RATE_LIMITS"
    )

    # Reverse proxies in front of the app whose X-Forwarded-For entry is trusted
    trusted_proxy_hops: int = Field(0, ge=0, alias="TRUSTED_PROXY_HOPS")

    # HSTS
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    model_config = SettingsConfigDict(env_file=".env", validate_by_name=True, extra="ignore")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("enable_rate_limit", "enable_hsts", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    @field_validator("rate_limits", mode="after")
    @classmethod
    def _merge_rate_limits(
        cls, value: dict[str, RateLimitRuleConfig]
    ) -> dict[str, RateLimitRuleConfig]:
        merged = _default_rate_limit_rules()
        merged.update(value)
        return merged


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _redis_config_factory() -> RedisConfig:
    return RedisConfig()  # type: ignore[call-arg]


def _token_config_factory() -> TokenConfig:
    return TokenConfig()  # type: ignore[call-arg]


def _observability_config_factory() -> ObservabilityConfig:
    return ObservabilityConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


_WEAK_SECRETS = ("dev", "development", "test", "dev-jwt-secret", "")


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    redis: RedisConfig = Field(default_factory=_redis_config_factory)
    tokens: TokenConfig = Field(default_factory=_token_config_factory)
    observability: ObservabilityConfig = Field(default_factory=_observability_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        insecure = [
            name
            for name, value in (
                ("SECRET_KEY", self.secret_key),
                ("JWT_SECRET", self.tokens.secret),
            )
            if value in _WEAK_SECRETS or len(value) < 32
        ]
        if insecure:
            print(
                f"\n❌ CRITICAL SECURITY ERROR: Insecure {', '.join(insecure)} detected in production!\n"
                "   Signing secrets must be strong random values (32+ chars) in production.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(48))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        for warning in self._production_warnings():
            print(f"⚠️  production config: {warning}", file=sys.stderr)

        return self

    def _production_warnings(self) -> list[str]:
        checks = (
            (not self.security.enable_rate_limit, "rate limiting is disabled"),
            ("*" in self.security.allowed_origins, "CORS allows any origin"),
            (not self.security.enable_hsts, "HSTS is disabled"),
            (self.debug_logging, "debug logging may expose request details"),
        )
        return [message for failed, message in checks if failed]

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = ["AppConfig", "DatabaseConfig", "RateLimitRuleConfig", "SecurityConfig", "load_config"]
