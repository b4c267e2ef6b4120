# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from redis import Redis
from sqlalchemy import text

from socialauth.infrastructure.db import ENGINE


def check_database() -> bool:
    with ENGINE.connect() as connection:
        connection.execute(text("SELECT 1"))
    return True


def check_redis(client: Redis) -> bool:
    return bool(client.ping())


__all__ = ["check_database", "check_redis"]
