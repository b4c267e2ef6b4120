# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from socialauth.domain.users.exceptions import SessionOperationFailedError
from socialauth.infrastructure.observability import record_auth_event
from socialauth.shared.errors.base import AppError
from socialauth.shared.logging import logger


@contextmanager
def session_operation(name: str) -> Iterator[None]:
    """Expected outcomes pass through; anything else becomes a generic failure."""
    try:
        yield
    except AppError:
        raise
    except Exception as exc:
        logger.exception(f"session.{name}: unexpected failure ({type(exc).__name__})")
        record_auth_event(name, "failed")
        raise SessionOperationFailedError() from exc


__all__ = ["session_operation"]
