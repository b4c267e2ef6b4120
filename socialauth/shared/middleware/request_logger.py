# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import secrets
import time
from typing import Any

from flask import Flask, Response, g, request

from socialauth.shared.logging import clear_correlation_id, logger, set_correlation_id
from socialauth.shared.middleware.proxy import client_ip

CORRELATION_HEADER = "X-Correlation-ID"

_SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key", "x-auth-token"}
_SENSITIVE_PARAMS = {"password", "token", "key", "secret", "auth"}


def _get_user_id() -> str | None:
    return getattr(g, "user_id", None)


def _sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    sanitized = {}
    for key, value in headers.items():
        if key.lower() in _SENSITIVE_HEADERS:
            sanitized[key] = f"<hashed:{hashlib.sha256(value.encode()).hexdigest()[:8]}>"
        else:
            sanitized[key] = value
    return sanitized


def _sanitize_query_params(params: dict[str, Any]) -> dict[str, Any]:
    return {
        key: "<redacted>" if any(s in key.lower() for s in _SENSITIVE_PARAMS) else value
        for key, value in params.items()
    }


def _incoming_correlation_id() -> str:
    # Accept an upstream id only when it is short and printable.
    candidate = request.headers.get(CORRELATION_HEADER, "")
    if 0 < len(candidate) <= 64 and candidate.isprintable():
        return candidate
    return secrets.token_urlsafe(8)


def configure_request_logging(app: Flask, *, debug_mode: bool = False) -> None:

    @app.before_request
    def _before_request() -> None:
        g.correlation_id = _incoming_correlation_id()
        set_correlation_id(g.correlation_id)
        g.request_start_time = time.time()

        if debug_mode:
            logger.info(
                f"Request started: {request.method} {request.path} "
                f"from {client_ip()}, "
                f"query={_sanitize_query_params(dict(request.args))}, "
                f"headers={_sanitize_headers(dict(request.headers))}, "
                f"body_size={len(request.data)}"
            )
        else:
            logger.info(f"Request: {request.method} {request.path} from {client_ip()}")

    @app.after_request
    def _after_request(response: Response) -> Response:
        duration = time.time() - getattr(g, "request_start_time", time.time())
        response.headers[CORRELATION_HEADER] = getattr(g, "correlation_id", "-")

        if debug_mode:
            logger.info(
                f"Request completed: {request.method} {request.path} "
                f"status={response.status_code}, duration={duration:.3f}s, "
                f"from {client_ip()}, user={_get_user_id()}"
            )
        else:
            logger.info(
                f"Response: {request.method} {request.path} "
                f"status={response.status_code}, duration={duration:.3f}s"
            )
        return response

    @app.teardown_request
    def _teardown_request(exc: BaseException | None) -> None:
        if exc is not None:
            logger.error(
                f"Request error: {type(exc).__name__} on "
                f"{request.method} {request.path} user={_get_user_id()}"
            )
        clear_correlation_id()


__all__ = ["CORRELATION_HEADER", "configure_request_logging"]
