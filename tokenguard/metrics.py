"""Prometheus collectors shared by the health, retry and alerting layers."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

REGISTRY = CollectorRegistry(auto_describe=True)

HEALTH_STATUS_GAUGE = Gauge(
    "tokenguard_health_status",
    "One-hot overall health status of the last health run.",
    ("level",),
    registry=REGISTRY,
)
HEALTH_CHECK_VALUE_GAUGE = Gauge(
    "tokenguard_health_check_value",
    "Value reported by each health check (booleans as 0/1).",
    ("check",),
    registry=REGISTRY,
)
HEALTH_RUNS_TOTAL = Counter(
    "tokenguard_health_runs_total",
    "Completed health runs by resulting status.",
    ("status",),
    registry=REGISTRY,
)
RETRY_ATTEMPTS_TOTAL = Counter(
    "tokenguard_retry_attempts_total",
    "Failed attempts that were followed by a retry.",
    ("operation",),
    registry=REGISTRY,
)
RETRY_EXHAUSTED_TOTAL = Counter(
    "tokenguard_retry_exhausted_total",
    "Operations that failed on their final attempt.",
    ("operation",),
    registry=REGISTRY,
)
RATE_LIMIT_WAIT_SECONDS = Counter(
    "tokenguard_rate_limit_wait_seconds_total",
    "Total time spent waiting in rate limiters.",
    registry=REGISTRY,
)
ALERTS_TOTAL = Counter(
    "tokenguard_alerts_total",
    "Alert decisions by level and outcome.",
    ("level", "outcome"),
    registry=REGISTRY,
)


def render_latest() -> bytes:
    return generate_latest(REGISTRY)


__all__ = [
    "ALERTS_TOTAL",
    "HEALTH_CHECK_VALUE_GAUGE",
    "HEALTH_RUNS_TOTAL",
    "HEALTH_STATUS_GAUGE",
    "RATE_LIMIT_WAIT_SECONDS",
    "REGISTRY",
    "RETRY_ATTEMPTS_TOTAL",
    "RETRY_EXHAUSTED_TOTAL",
    "render_latest",
]
