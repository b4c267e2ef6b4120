# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import wraps

from flask import Flask, current_app, g, make_response, request

from socialauth.infrastructure.audit import AuditAction, audit_log
from socialauth.infrastructure.rate_limit import RateLimitRule, SlidingWindowRateLimiter
from socialauth.shared.config import RateLimitRuleConfig, SecurityConfig
from socialauth.shared.errors.base import RateLimitExceededError
from socialauth.shared.logging import logger
from socialauth.shared.middleware.proxy import client_ip

RATE_LIMITER_EXTENSION = "socialauth.rate_limiter"


@dataclass(slots=True, frozen=True)
class RateLimitSettings:
    limiter: SlidingWindowRateLimiter
    enabled: bool
    rules: Mapping[str, RateLimitRuleConfig]

    def resolve(self, rule: str | RateLimitRule) -> RateLimitRule:
        if isinstance(rule, RateLimitRule):
            return rule
        rule_config = self.rules[rule]
        return RateLimitRule(
            max_requests=rule_config.max_requests,
            window_seconds=rule_config.window_seconds,
            fail_closed=rule_config.fail_closed,
            name=rule,
        )


def configure_rate_limiting(
    app: Flask, limiter: SlidingWindowRateLimiter, security: SecurityConfig
) -> None:
    app.extensions[RATE_LIMITER_EXTENSION] = RateLimitSettings(
        limiter=limiter,
        enabled=security.enable_rate_limit,
        rules=dict(security.rate_limits),
    )


def resolve_identifier() -> str:
    user_id = getattr(g, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{client_ip() or 'unknown'}"


def rate_limit(rule: str | RateLimitRule):
    """Guard a view with a named rule from ``RATE_LIMITS`` or an explicit one.

    Apply beneath ``require_auth`` so authenticated callers are keyed by user.
    """

    def decorator(f: Callable):
        @wraps(f)
        def wrapper(*args, **kwargs):
            settings: RateLimitSettings | None = current_app.extensions.get(
                RATE_LIMITER_EXTENSION
            )
            if settings is None:
                logger.debug(f"rate_limit: no limiter configured for {request.path}")
                return f(*args, **kwargs)
            if not settings.enabled:
                return f(*args, **kwargs)

            identifier = resolve_identifier()
            decision = settings.limiter.hit(identifier, request.path, settings.resolve(rule))
            if not decision.allowed:
                audit_log(
                    AuditAction.RATE_LIMITED,
                    user_id=getattr(g, "user_id", None),
                    ip_address=client_ip(),
                    details={"endpoint": request.path, "identifier": identifier},
                    success=False,
                )
                raise RateLimitExceededError(
                    limit=decision.limit,
                    reset=decision.reset,
                    retry_after=decision.retry_after,
                )

            response = make_response(f(*args, **kwargs))
            response.headers["X-RateLimit-Limit"] = str(decision.limit)
            response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
            response.headers["X-RateLimit-Reset"] = str(decision.reset)
            return response

        return wrapper

    return decorator


__all__ = [
    "RATE_LIMITER_EXTENSION",
    "RateLimitSettings",
    "configure_rate_limiting",
    "rate_limit",
    "resolve_identifier",
]
