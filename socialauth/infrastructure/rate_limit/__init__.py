# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .redis_client import create_redis_client
from .sliding_window import RateLimitDecision, RateLimitRule, SlidingWindowRateLimiter

__all__ = [
    "RateLimitDecision",
    "RateLimitRule",
    "SlidingWindowRateLimiter",
    "create_redis_client",
]
