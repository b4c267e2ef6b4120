# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Error hierarchy rendered by the Flask handlers in :mod:`.http`.

The wire shape is ``{"error": <code>}`` plus an optional ``context`` object.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, ClassVar


@dataclass(slots=True)
class AppError(Exception):
    code: str
    status: HTTPStatus
    context: Mapping[str, Any] | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.code)

    def to_dict(self) -> dict[str, Any]:
        if not self.context:
            return {"error": self.code}
        return {"error": self.code, "context": dict(self.context)}


class DomainError(AppError):
    """Business-rule failure; subclasses pin the code and status."""

    error_code: ClassVar[str] = "domain_error"
    http_status: ClassVar[HTTPStatus] = HTTPStatus.BAD_REQUEST

    def __init__(self, *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(code=self.error_code, status=self.http_status, context=context)


class InfrastructureError(AppError):
    error_code: ClassVar[str] = "infrastructure_error"
    http_status: ClassVar[HTTPStatus] = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self) -> None:
        super().__init__(code=self.error_code, status=self.http_status)


class ValidationError(AppError):
    def __init__(self, *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(
            code="validation_error",
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            context=context,
        )


class UnauthorizedError(AppError):
    def __init__(self) -> None:
        super().__init__(code="unauthorized", status=HTTPStatus.UNAUTHORIZED)


class RateLimitExceededError(AppError):
    """429 carrying the limiter's verdict so the handler can emit headers."""

    def __init__(self, *, limit: int, reset: int, retry_after: int) -> None:
        super().__init__(
            code="rate_limit_exceeded",
            status=HTTPStatus.TOO_MANY_REQUESTS,
            context={"retry_after_seconds": retry_after},
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(limit),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(reset),
            },
        )


class RateLimitUnavailableError(InfrastructureError):
    error_code = "rate_limit_unavailable"
    http_status = HTTPStatus.SERVICE_UNAVAILABLE
