# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Loguru setup shared by the API and the maintenance scripts.

Every record carries the request correlation id and is passed through the
sensitive-data patcher before any sink sees it.
"""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar

from loguru import logger as _logger

from .sensitive_filter import sanitize_record

_TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_NO_CORRELATION = "-"
_CORRELATION_ID: ContextVar[str] = ContextVar("correlation_id", default=_NO_CORRELATION)

# Chatty libraries and the level they are capped at.
_LIBRARY_LEVELS = {
    "werkzeug": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "urllib3": logging.WARNING,
}


class _InterceptHandler(logging.Handler):
    """Route stdlib records (werkzeug, sqlalchemy, redis) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        _logger.bind(correlation_id=_CORRELATION_ID.get()).opt(
            depth=depth, exception=record.exc_info
        ).log(level, record.getMessage())


class ContextualLogger:
    """Proxy for loguru that binds the current correlation id on every call."""

    def __getattr__(self, name):  # pragma: no cover
        return getattr(_logger.bind(correlation_id=_CORRELATION_ID.get()), name)


def set_correlation_id(value: str | None) -> None:
    _CORRELATION_ID.set(value or _NO_CORRELATION)


def get_correlation_id() -> str:
    return _CORRELATION_ID.get()


def clear_correlation_id() -> None:
    _CORRELATION_ID.set(_NO_CORRELATION)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def setup_logging(level: str | None = None, *, debug_mode: bool = False) -> None:
    """(Re)install sinks. ``LOG_LEVEL``, ``LOG_FILE`` and ``LOG_JSON`` tune it."""
    if debug_mode and not level:
        level = "DEBUG"
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    json_logs = _env_flag("LOG_JSON")

    _logger.remove()
    _logger.configure(extra={"correlation_id": _NO_CORRELATION}, patcher=sanitize_record)

    if json_logs:
        _logger.add(sys.stderr, level=level, serialize=True, backtrace=False, diagnose=False)
    else:
        _logger.add(
            sys.stderr,
            level=level,
            format=_TEXT_FORMAT,
            colorize=True,
            backtrace=False,
            diagnose=False,
        )

    log_file = os.getenv("LOG_FILE")
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        _logger.add(
            log_file,
            level=level,
            format=_TEXT_FORMAT,
            serialize=json_logs,
            colorize=False,
            backtrace=False,
            diagnose=False,
            enqueue=True,
            rotation="20 MB",
            retention=5,
            encoding="utf-8",
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name, lib_level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(lib_level)


logger = ContextualLogger()

__all__ = [
    "clear_correlation_id",
    "get_correlation_id",
    "logger",
    "set_correlation_id",
    "setup_logging",
]
