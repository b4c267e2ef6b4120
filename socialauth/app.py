# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import importlib
from typing import Any, Protocol, cast

from flask import Flask, Response

from socialauth.infrastructure.container import Container, container as default_container
from socialauth.infrastructure.db import init_db
from socialauth.infrastructure.observability import configure_metrics
from socialauth.interfaces.http.auth import configure_authentication
from socialauth.shared.errors import register_error_handler
from socialauth.shared.logging import logger, setup_logging
from socialauth.shared.middleware.proxy import configure_proxy
from socialauth.shared.middleware.rate_limit import configure_rate_limiting
from socialauth.shared.middleware.request_logger import configure_request_logging


class _CORSCallable(Protocol):
    def __call__(self, app: Flask, **kwargs: Any) -> Any: ...


_flask_cors = importlib.import_module("flask_cors")
CORS = cast(_CORSCallable, _flask_cors.CORS)


def create_app(container: Container | None = None) -> Flask:
    container = container or default_container
    config = container.config

    init_db()
    setup_logging(debug_mode=config.debug_logging)
    configure_metrics(config.observability.metrics_enabled)

    app = Flask(__name__)
    app.config.update(SECRET_KEY=config.secret_key)

    configure_proxy(app, config.security.trusted_proxy_hops)
    register_error_handler(app, debug_mode=config.debug_logging)
    configure_request_logging(app, debug_mode=config.debug_logging)
    configure_authentication(app, container.authenticate_use_case)
    configure_rate_limiting(app, container.rate_limiter, config.security)

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}},
        "expose_headers": [
            "Retry-After",
            "X-Correlation-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
        ],
    }
    CORS(app, **cors_kwargs)

    app.register_blueprint(container.misc_controller.as_blueprint())
    app.register_blueprint(container.auth_controller.as_blueprint())

    @app.after_request
    def _add_security_headers(resp: Response) -> Response:
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cache-Control", "no-store")
        resp.headers.setdefault("Cross-Origin-Resource-Policy", "same-origin")

        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return resp

    logger.info(f"{config.observability.service_name}: Flask app initialized")
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
