"""Health battery, ordered severity and report assembly."""

from .aggregator import HealthAggregator, build_client, run_health_check
from .checks import DEFAULT_CHECKS, CheckContext, CheckOutcome, HealthCheck, HealthTargets
from .report import HealthReport
from .status import HealthStatus

__all__ = [
    "CheckContext",
    "CheckOutcome",
    "DEFAULT_CHECKS",
    "HealthAggregator",
    "HealthCheck",
    "HealthReport",
    "HealthStatus",
    "HealthTargets",
    "build_client",
    "run_health_check",
]
