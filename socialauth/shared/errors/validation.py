# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any, NoReturn

from pydantic import ValidationError as PydanticValidationError
from pydantic_core import ErrorDetails

from .base import ValidationError

_PLAIN_TYPES = (str, int, float, bool, type(None))


def _describe(error: ErrorDetails) -> dict[str, Any]:
    field_path = ".".join(str(part) for part in error["loc"]) or "body"
    entry: dict[str, Any] = {"field": field_path, "type": error["type"]}
    ctx = error.get("ctx")
    if ctx:
        # ctx can hold the raised exception object itself
        entry["ctx"] = {k: v if isinstance(v, _PLAIN_TYPES) else str(v) for k, v in ctx.items()}
    return entry


def format_pydantic_errors(exc: PydanticValidationError) -> dict[str, Any]:
    """Flatten pydantic errors into ``{"fields": [...], "errors": [...]}``.

    Input values are never echoed back; a rejected password must not appear
    in the response body.
    """
    errors = [_describe(error) for error in exc.errors(include_url=False, include_input=False)]
    return {
        "fields": sorted({entry["field"] for entry in errors}),
        "errors": errors,
    }


def raise_validation_error(exc: PydanticValidationError) -> NoReturn:
    raise ValidationError(context=format_pydantic_errors(exc)) from exc


__all__ = [
    "format_pydantic_errors",
    "raise_validation_error",
]
