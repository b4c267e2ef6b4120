# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Security audit trail for session lifecycle events.

Each event goes to the log and to the ``audit_logs`` table. A failed table
write is logged and dropped; auditing never fails the request that caused it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from socialauth.shared.logging import get_correlation_id, logger

_REDACTED_KEYS = ("password", "token", "secret", "hash", "authorization")
_MAX_DETAILS_LENGTH = 2048


class AuditAction(str, Enum):
    REGISTER = "register"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    TOKEN_REFRESHED = "token_refreshed"
    REFRESH_TOKEN_REUSE = "refresh_token_reuse"
    PASSWORD_CHANGED = "password_changed"
    SESSIONS_REVOKED = "sessions_revoked"
    RATE_LIMITED = "rate_limited"


@dataclass(slots=True, frozen=True)
class AuditEvent:
    action: AuditAction
    user_id: str | None
    ip_address: str | None
    success: bool
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def describe(self) -> str:
        parts = [
            f"AUDIT: {self.action.value}",
            f"user_id={self.user_id}",
            f"ip={self.ip_address}",
            f"success={self.success}",
            f"cid={get_correlation_id()}",
        ]
        if self.details:
            parts.append(f"details={self.details}")
        return " | ".join(parts)

    def details_json(self) -> str | None:
        if not self.details:
            return None
        encoded = json.dumps(self.details, default=str, sort_keys=True)
        return encoded[:_MAX_DETAILS_LENGTH]


def _redact(details: dict[str, Any]) -> dict[str, Any]:
    return {
        key: "***REDACTED***" if any(k in key.lower() for k in _REDACTED_KEYS) else value
        for key, value in details.items()
    }


def _persist(event: AuditEvent) -> None:
    from socialauth.infrastructure.db.models import AuditLog
    from socialauth.infrastructure.db.session import session_scope

    try:
        with session_scope() as session:
            session.add(
                AuditLog(
                    timestamp=event.timestamp,
                    action=event.action.value,
                    user_id=event.user_id,
                    ip_address=event.ip_address,
                    success=event.success,
                    details_json=event.details_json(),
                )
            )
    except Exception as db_error:
        logger.warning(f"audit: could not store {event.action.value} event: {db_error}")


def audit_log(
    action: AuditAction,
    user_id: str | None = None,
    ip_address: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    event = AuditEvent(
        action=action,
        user_id=user_id,
        ip_address=ip_address,
        success=success,
        details=_redact(details or {}),
    )
    if success:
        logger.info(event.describe())
    else:
        logger.warning(event.describe())
    _persist(event)


__all__ = ["AuditAction", "AuditEvent", "audit_log"]
