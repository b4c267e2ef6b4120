# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify
from redis import Redis

from socialauth.infrastructure.health import check_database, check_redis
from socialauth.shared.logging import logger


class MiscController:
    def __init__(self, *, redis_client: Redis) -> None:
        self._redis_client = redis_client

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/api/health", view_func=self.health, methods=["GET"])
        return bp

    def health(self) -> tuple[Response, int]:
        status: dict[str, object] = {"ok": True}
        try:
            check_database()
            status["database"] = "ok"
        except Exception as exc:
            logger.error(f"health: database check failed: {exc}")
            status["ok"] = False
            status["database"] = "error"

        # Limiter degrades open without redis, so it never fails the health check.
        try:
            check_redis(self._redis_client)
            status["redis"] = "ok"
        except Exception as exc:
            logger.warning(f"health: redis check failed: {exc}")
            status["redis"] = "degraded"

        return jsonify(status), 200 if status["ok"] else 503
