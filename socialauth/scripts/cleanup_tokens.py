# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Maintenance for the refresh token table.

Deletes expired records, and optionally revokes every live session of one user.
Meant to run from cron next to the API.
"""

from __future__ import annotations

import argparse

from socialauth.infrastructure.container import container
from socialauth.infrastructure.db import init_db
from socialauth.shared.logging import logger, setup_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Refresh token maintenance")
    parser.add_argument(
        "--revoke-user",
        metavar="USER_ID",
        help="Also revoke every active refresh token of this user",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    init_db()

    deleted = container.cleanup_expired_tokens_use_case.execute()
    logger.info(f"cleanup_tokens: deleted={deleted}")

    if args.revoke_user:
        revoked = container.revoke_sessions_use_case.execute(args.revoke_user)
        logger.info(f"cleanup_tokens: revoked={revoked} user={args.revoke_user}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
