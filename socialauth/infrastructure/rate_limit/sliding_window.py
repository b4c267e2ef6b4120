# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Sliding-window request counter on Redis sorted sets.

Each ``(identifier, endpoint)`` pair owns one sorted set whose members are
request timestamps in milliseconds. A hit purges members older than the window,
counts the rest and, if under the limit, records itself. The purge/count and
the insert are two round-trips, so concurrent hits from one identity can
overshoot ``max_requests`` slightly.

If Redis cannot be reached the limiter fails open unless the rule asks to
fail closed.
"""

from __future__ import annotations

import math
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass

from redis import Redis

from socialauth.infrastructure.observability import record_rate_limit_decision
from socialauth.shared.errors.base import RateLimitUnavailableError
from socialauth.shared.logging import logger


@dataclass(slots=True, frozen=True)
class RateLimitRule:
    max_requests: int
    window_seconds: int
    fail_closed: bool = False
    name: str = "default"

    def __post_init__(self) -> None:
        if int(self.max_requests) <= 0:
            raise ValueError("max_requests must be a positive integer")
        if int(self.window_seconds) <= 0:
            raise ValueError("window_seconds must be a positive integer")


@dataclass(slots=True, frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset: int
    retry_after: int = 0
    degraded: bool = False


class SlidingWindowRateLimiter:
    def __init__(
        self,
        client: Redis,
        *,
        key_prefix: str = "ratelimit",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._key_prefix = key_prefix
        self._clock = clock

    def key_for(self, identifier: str, endpoint: str) -> str:
        return f"{self._key_prefix}:{identifier}:{endpoint}"

    def hit(self, identifier: str, endpoint: str, rule: RateLimitRule) -> RateLimitDecision:
        now_ms = int(self._clock() * 1000)
        window_ms = rule.window_seconds * 1000
        key = self.key_for(identifier, endpoint)

        try:
            pipe = self._client.pipeline(transaction=False)
            pipe.zremrangebyscore(key, 0, now_ms - window_ms)
            pipe.zcard(key)
            pipe.zrange(key, 0, 0, withscores=True)
            _, count, oldest = pipe.execute()

            if int(count) >= rule.max_requests:
                oldest_ms = float(oldest[0][1]) if oldest else float(now_ms)
                retry_after = max(1, math.ceil((oldest_ms + window_ms - now_ms) / 1000))
                record_rate_limit_decision(rule.name, "rejected")
                logger.info(
                    f"rate_limit: rejected key={key} count={count} "
                    f"limit={rule.max_requests} retry_after={retry_after}s"
                )
                return RateLimitDecision(
                    allowed=False,
                    limit=rule.max_requests,
                    remaining=0,
                    reset=math.ceil((oldest_ms + window_ms) / 1000),
                    retry_after=retry_after,
                )

            member = f"{now_ms}-{secrets.token_hex(6)}"
            pipe = self._client.pipeline(transaction=False)
            pipe.zadd(key, {member: now_ms})
            pipe.expire(key, rule.window_seconds)
            pipe.execute()
        except Exception as exc:
            if rule.fail_closed:
                record_rate_limit_decision(rule.name, "unavailable")
                logger.error(f"rate_limit: store unavailable, failing closed key={key}: {exc}")
                raise RateLimitUnavailableError() from exc
            record_rate_limit_decision(rule.name, "fail_open")
            logger.warning(f"rate_limit: store unavailable, failing open key={key}: {exc}")
            return RateLimitDecision(
                allowed=True,
                limit=rule.max_requests,
                remaining=rule.max_requests,
                reset=math.ceil((now_ms + window_ms) / 1000),
                degraded=True,
            )

        record_rate_limit_decision(rule.name, "allowed")
        return RateLimitDecision(
            allowed=True,
            limit=rule.max_requests,
            remaining=max(0, rule.max_requests - int(count) - 1),
            reset=math.ceil((now_ms + window_ms) / 1000),
        )


__all__ = ["RateLimitDecision", "RateLimitRule", "SlidingWindowRateLimiter"]
