# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from typing import Any

_I = re.IGNORECASE

# (pattern, replacement) pairs, applied in order. Whole JWTs go first so the
# token-specific rules below never see half of one.
_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\beyJ[\w-]+\.[\w-]+\.[\w-]+"), "***JWT***"),
    (re.compile(r"(bearer\s+)([\w\-.]{20,})", _I), r"\1***REDACTED***"),
    (
        re.compile(r"((?:access|refresh)?[_-]?token\s*[:=]\s*['\"]?)([\w\-.]{20,})", _I),
        r"\1***REDACTED***",
    ),
    (re.compile(r"((?:jwt[_-]?)?secret(?:[_-]?key)?\s*[:=]\s*['\"]?)([^'\"\s]{8,})", _I), r"\1***REDACTED***"),
    (re.compile(r"((?:password|pwd)\s*[:=]\s*['\"]?)([^'\"\s]{6,})", _I), r"\1***REDACTED***"),
    (re.compile(r"(authorization\s*:\s*['\"]?)([^'\"]{10,})", _I), r"\1***REDACTED***"),
    (re.compile(r"(postgres(?:ql)?|mysql|rediss?)://([^:@/]*):([^@]+)@"), r"\1://\2:***REDACTED***@"),
    # Keep the domain of an email address; it is useful when triaging.
    (re.compile(r"[\w.%+-]+@([\w-]+(?:\.[\w-]+)*\.[a-zA-Z]{2,})"), r"***@\1"),
)


def sanitize_message(message: str) -> str:
    for pattern, replacement in _RULES:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> None:
    """loguru patcher: rewrites the message in place."""
    if "message" in record:
        record["message"] = sanitize_message(record["message"])


__all__ = ["sanitize_message", "sanitize_record"]
