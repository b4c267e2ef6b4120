from __future__ import annotations

import pytest
from flask import Flask
from sqlalchemy import select

from socialauth.app import create_app
from socialauth.application.services.password_hashing import WerkzeugPasswordHasher
from socialauth.infrastructure.container import Container
from socialauth.infrastructure.db import session_scope
from socialauth.infrastructure.db.models import AuditLog, RefreshToken, User
from socialauth.shared.config import AppConfig, RateLimitRuleConfig, SecurityConfig
from socialauth.tests.fakes import FakeRedis

BODY = {
    "email": "alice@example.com",
    "password": "Sup3r$ecret",
    "username": "alice",
    "display_name": "Alice",
}


@pytest.fixture()
def redis_client() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def app(reset_database, redis_client: FakeRedis) -> Flask:
    container = Container(redis_client=redis_client)
    container.password_hasher = WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")
    return create_app(container)


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_register_refresh_logout_flow(app: Flask) -> None:
    with app.test_client() as client:
        register = client.post("/api/auth/register", json=BODY)
        assert register.status_code == 201
        tokens = register.get_json()["tokens"]

        me = client.get("/api/auth/me", headers=_auth(tokens["access_token"]))
        assert me.status_code == 200
        assert me.get_json()["email"] == "alice@example.com"

        rotated = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert rotated.status_code == 200
        new_tokens = rotated.get_json()["tokens"]
        assert new_tokens["refresh_token"] != tokens["refresh_token"]

        logout = client.post("/api/auth/logout", headers=_auth(new_tokens["access_token"]))
        assert logout.status_code == 200
        again = client.post("/api/auth/logout", headers=_auth(new_tokens["access_token"]))
        assert again.status_code == 200

        after = client.post("/api/auth/refresh", json={"refresh_token": new_tokens["refresh_token"]})
        assert after.status_code == 401
        assert after.get_json() == {"error": "token_revoked"}

    with session_scope() as session:
        assert session.scalars(select(User)).one().email == "alice@example.com"
        stored = session.scalars(select(RefreshToken)).all()
        assert len(stored) == 2
        assert all(row.is_revoked for row in stored)
        assert all(row.token_hash not in (tokens["refresh_token"], new_tokens["refresh_token"]) for row in stored)


def test_replayed_refresh_token_is_rejected_and_audited(app: Flask) -> None:
    with app.test_client() as client:
        tokens = client.post("/api/auth/register", json=BODY).get_json()["tokens"]
        first = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert first.status_code == 200

        replay = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert replay.status_code == 401

        latest = first.get_json()["tokens"]["refresh_token"]
        assert client.post("/api/auth/refresh", json={"refresh_token": latest}).status_code == 401

    with session_scope() as session:
        actions = set(session.scalars(select(AuditLog.action)).all())
    assert {"register", "token_refreshed", "refresh_token_reuse"} <= actions


def test_duplicate_registration_conflicts(app: Flask) -> None:
    with app.test_client() as client:
        assert client.post("/api/auth/register", json=BODY).status_code == 201

        same_email = client.post(
            "/api/auth/register", json={**BODY, "email": "ALICE@example.com", "username": "bob"}
        )
        same_username = client.post(
            "/api/auth/register", json={**BODY, "email": "bob@example.com"}
        )

    assert same_email.status_code == 409
    assert same_email.get_json() == {"error": "email_taken"}
    assert same_username.status_code == 409
    assert same_username.get_json() == {"error": "username_taken"}


def test_login_and_change_password(app: Flask) -> None:
    with app.test_client() as client:
        client.post("/api/auth/register", json=BODY)

        bad = client.post("/api/auth/login", json={"email": BODY["email"], "password": "wrong"})
        assert bad.status_code == 401

        login = client.post(
            "/api/auth/login", json={"email": "ALICE@example.com", "password": BODY["password"]}
        )
        assert login.status_code == 200
        tokens = login.get_json()["tokens"]

        changed = client.post(
            "/api/auth/password",
            json={"current_password": BODY["password"], "new_password": "N3w$ecret!"},
            headers=_auth(tokens["access_token"]),
        )
        assert changed.status_code == 200

        old_password = client.post("/api/auth/login", json={"email": BODY["email"], "password": BODY["password"]})
        assert old_password.status_code == 401
        new_password = client.post("/api/auth/login", json={"email": BODY["email"], "password": "N3w$ecret!"})
        assert new_password.status_code == 200


def test_requests_survive_rate_limit_store_outage(app: Flask, redis_client: FakeRedis) -> None:
    redis_client.available = False

    with app.test_client() as client:
        response = client.post("/api/auth/register", json=BODY)
        health = client.get("/api/health")

    assert response.status_code == 201
    assert "X-RateLimit-Limit" in response.headers
    assert health.status_code == 200
    assert health.get_json() == {"ok": True, "database": "ok", "redis": "degraded"}


def test_responses_carry_correlation_and_security_headers(app: Flask) -> None:
    with app.test_client() as client:
        response = client.get("/api/health", headers={"X-Correlation-ID": "req-123"})
        missing = client.get("/api/nope")

    assert response.get_json() == {"ok": True, "database": "ok", "redis": "ok"}
    assert response.headers["X-Correlation-ID"] == "req-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert missing.status_code == 404
    assert missing.get_json() == {"error": "not_found"}


def test_login_limit_holds_when_forwarded_for_changes(app: Flask) -> None:
    credentials = {"email": "nobody@example.com", "password": "Wr0ng$ecret"}

    with app.test_client() as client:
        statuses = [
            client.post(
                "/api/auth/login",
                json=credentials,
                headers={"X-Forwarded-For": f"10.0.0.{i}"},
            ).status_code
            for i in range(12)
        ]

    assert statuses[:10] == [401] * 10
    assert statuses[10:] == [429, 429]


def test_injected_config_drives_rate_limit_rules(reset_database) -> None:
    config = AppConfig(
        security=SecurityConfig(
            enable_rate_limit=True,
            rate_limits={"auth.login": RateLimitRuleConfig(max_requests=2, window_seconds=60)},
        )
    )
    container = Container(config=config, redis_client=FakeRedis())
    container.password_hasher = WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")
    credentials = {"email": "nobody@example.com", "password": "Wr0ng$ecret"}

    with create_app(container).test_client() as client:
        statuses = [client.post("/api/auth/login", json=credentials).status_code for _ in range(3)]

    assert statuses == [401, 401, 429]
