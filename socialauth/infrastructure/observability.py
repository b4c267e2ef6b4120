# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from prometheus_client import Counter

from socialauth.shared.config import load_config

AUTH_EVENTS = Counter(
    "socialauth_auth_events_total",
    "Session lifecycle outcomes",
    labelnames=("event", "outcome"),
)
RATE_LIMIT_DECISIONS = Counter(
    "socialauth_rate_limit_decisions_total",
    "Rate limiter decisions per rule",
    labelnames=("rule", "decision"),
)

# Environment default until create_app applies the container's config.
_metrics_enabled = load_config().observability.metrics_enabled


def configure_metrics(enabled: bool) -> None:
    global _metrics_enabled
    _metrics_enabled = enabled


def record_auth_event(event: str, outcome: str) -> None:
    if _metrics_enabled:
        AUTH_EVENTS.labels(event=event, outcome=outcome).inc()


def record_rate_limit_decision(rule: str, decision: str) -> None:
    if _metrics_enabled:
        RATE_LIMIT_DECISIONS.labels(rule=rule, decision=decision).inc()


__all__ = [
    "AUTH_EVENTS",
    "RATE_LIMIT_DECISIONS",
    "configure_metrics",
    "record_auth_event",
    "record_rate_limit_decision",
]
