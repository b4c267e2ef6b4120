# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from redis import Redis

from socialauth.shared.config import AppConfig


def create_redis_client(config: AppConfig) -> Redis:
    return Redis.from_url(
        config.redis.url,
        decode_responses=True,
        socket_timeout=config.redis.socket_timeout,
        socket_connect_timeout=config.redis.socket_timeout,
    )


__all__ = ["create_redis_client"]
