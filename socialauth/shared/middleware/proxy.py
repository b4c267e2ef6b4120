# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Client address resolution.

``X-Forwarded-*`` headers are only honoured for the number of reverse proxies
configured in ``TRUSTED_PROXY_HOPS``; werkzeug's ``ProxyFix`` rewrites
``remote_addr`` from them. Everything else reads ``request.remote_addr`` and
never the raw header, which any client can set.
"""

from __future__ import annotations

from flask import Flask, request
from werkzeug.middleware.proxy_fix import ProxyFix

from socialauth.shared.logging import logger


def configure_proxy(app: Flask, trusted_hops: int) -> None:
    if trusted_hops <= 0:
        return
    app.wsgi_app = ProxyFix(  # type: ignore[method-assign]
        app.wsgi_app, x_for=trusted_hops, x_proto=trusted_hops
    )
    logger.info(f"proxy: trusting {trusted_hops} X-Forwarded-* hop(s)")


def client_ip() -> str | None:
    return request.remote_addr or None


__all__ = ["client_ip", "configure_proxy"]
