# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException

from socialauth.shared.logging import logger
from socialauth.shared.middleware.proxy import client_ip

from .base import AppError


def handle_app_error(error: AppError) -> tuple[Response, HTTPStatus]:
    response = jsonify(error.to_dict())
    response.headers.update(error.headers)
    return response, error.status


def register_error_handler(
    app: Flask,
    *,
    debug_mode: bool = False,
    default_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
) -> None:
    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        if exc.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error(f"Application error {exc.code} on {request.method} {request.path}")
        else:
            logger.info(f"Handled application error {exc.code} on {request.method} {request.path}")
        return handle_app_error(exc)

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        code = (exc.name or "http_error").lower().replace(" ", "_")
        return jsonify({"error": code}), exc.code or default_status

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        where = f"{request.method} {request.path}"
        if debug_mode:
            logger.opt(exception=exc).error(
                f"unhandled {type(exc).__name__} on {where} ip={client_ip()} "
                f"user={getattr(g, 'user_id', None)} body_size={request.content_length or 0}"
            )
        else:
            logger.error(f"unhandled {type(exc).__name__} on {where}")
        return jsonify({"error": "internal_error"}), default_status
