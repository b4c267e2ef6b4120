# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import wraps

from flask import Flask, current_app, g, request

from socialauth.application.use_cases.users.authenticate import AuthenticateUseCase
from socialauth.domain.users.entities import ClaimSet
from socialauth.shared.errors.base import UnauthorizedError
from socialauth.shared.logging import logger
from socialauth.shared.middleware.proxy import client_ip

AUTHENTICATOR_EXTENSION = "socialauth.authenticator"


def configure_authentication(app: Flask, authenticator: AuthenticateUseCase) -> None:
    app.extensions[AUTHENTICATOR_EXTENSION] = authenticator


def bearer_token() -> str:
    auth = request.headers.get("Authorization", "")
    if auth[:7].lower() == "bearer ":
        return auth[7:].strip()
    return ""


def current_claims() -> ClaimSet:
    """Claims set by ``require_auth``; outside a guarded view this is a 401."""
    claims: ClaimSet | None = getattr(g, "claims", None)
    if claims is None:
        raise UnauthorizedError()
    return claims


def _authenticate(token: str) -> ClaimSet:
    authenticator: AuthenticateUseCase = current_app.extensions[AUTHENTICATOR_EXTENSION]
    claims = authenticator.execute(token)
    g.claims = claims
    g.user_id = claims.user_id
    return claims


def require_auth(f: Callable):
    @wraps(f)
    def inner(*a, **kw):
        token = bearer_token()
        if not token:
            logger.warning(
                f"No bearer token on {request.method} {request.path} "
                f"from {client_ip()}"
            )
            raise UnauthorizedError()
        _authenticate(token)
        logger.debug(f"Auth OK: user={g.user_id} {request.method} {request.path}")
        return f(*a, **kw)

    return inner


__all__ = [
    "AUTHENTICATOR_EXTENSION",
    "bearer_token",
    "configure_authentication",
    "current_claims",
    "require_auth",
]
