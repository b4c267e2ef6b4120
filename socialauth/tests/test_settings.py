from __future__ import annotations

import pytest

from socialauth.shared.config import AppConfig


def test_token_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ACCESS_TOKEN_TTL", raising=False)
    monkeypatch.delenv("REFRESH_TOKEN_TTL", raising=False)

    config = AppConfig()

    assert config.tokens.access_ttl_seconds == 900
    assert config.tokens.refresh_ttl_seconds == 604800
    assert config.tokens.algorithm == "HS256"


def test_rate_limit_overrides_merge_with_presets(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(
        "RATE_LIMITS",
        '{"auth.login": {"max_requests": 3, "window_seconds": 60, "fail_closed": true}}',
    )

    rules = AppConfig().security.rate_limits

    assert rules["auth.login"].max_requests == 3
    assert rules["auth.login"].fail_closed is True
    assert rules["auth.register"].max_requests == 5
    assert rules["read.standard"].window_seconds == 60


def test_allowed_origins_accepts_comma_list(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example")

    assert AppConfig().security.allowed_origins == ["https://a.example", "https://b.example"]


def test_production_refuses_weak_jwt_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("SECRET_KEY", "x" * 48)
    monkeypatch.setenv("JWT_SECRET", "dev-jwt-secret")

    with pytest.raises(SystemExit):
        AppConfig()
