from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Sequence

from ..config.loader import ConfigError, load_settings
from ..config.schema import HealthThresholds, LedgerSettings, Settings
from ..ledger.client import LedgerQueryClient, SolanaRpcClient
from ..metrics import HEALTH_CHECK_VALUE_GAUGE, HEALTH_RUNS_TOTAL, HEALTH_STATUS_GAUGE
from ..resilience.rate_limit import RateLimiter
from ..resilience.retry import RetryPolicy
from .checks import DEFAULT_CHECKS, CheckContext, HealthCheck, HealthTargets
from .report import HealthReport
from .status import HealthStatus

LOGGER = logging.getLogger(__name__)


class HealthAggregator:
    """Run the check battery in order and fold the outcomes into one report.

    A failing check never stops the battery; its exception becomes an error
    entry, CRITICAL for essential checks and WARNING otherwise.
    """

    def __init__(
        self,
        client: LedgerQueryClient,
        targets: HealthTargets,
        *,
        thresholds: HealthThresholds | None = None,
        retry_policy: RetryPolicy | None = None,
        checks: Sequence[HealthCheck] = DEFAULT_CHECKS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._targets = targets
        self._thresholds = thresholds or HealthThresholds()
        self._retry_policy = retry_policy or RetryPolicy()
        self._checks = tuple(checks)
        self._sleep = sleep

    @property
    def checks(self) -> tuple[HealthCheck, ...]:
        return self._checks

    async def run(self) -> HealthReport:
        report = HealthReport()
        ctx = CheckContext(
            client=self._client,
            targets=self._targets,
            thresholds=self._thresholds,
            retry_policy=self._retry_policy,
            sleep=self._sleep,
        )
        for check in self._checks:
            await self._run_check(check, ctx, report)
        _update_metrics(report)
        LOGGER.info(
            "health.completed",
            extra={
                "status": report.status.label,
                "errors": len(report.errors),
                "warnings": len(report.warnings),
            },
        )
        return report

    async def _run_check(self, check: HealthCheck, ctx: CheckContext, report: HealthReport) -> None:
        report.checks[check.name] = check.default_value
        try:
            outcome = await check.run(ctx)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            level = HealthStatus.CRITICAL if check.essential else HealthStatus.WARNING
            LOGGER.warning(
                "health.check_failed",
                extra={"check": check.name, "level": level.label, "error": str(exc)},
                exc_info=True,
            )
            report.add_error(f"{check.failure_message}: {exc}", level)
            return
        report.checks[check.name] = outcome.value
        for message in outcome.errors:
            report.add_error(message, outcome.status)
        for message in outcome.warnings:
            report.add_warning(message)
        for message in outcome.notices:
            report.add_warning(message, escalate=False)
        report.escalate(outcome.status)


def _update_metrics(report: HealthReport) -> None:
    for level in HealthStatus:
        HEALTH_STATUS_GAUGE.labels(level=level.label).set(1.0 if report.status is level else 0.0)
    for name, value in report.checks.items():
        HEALTH_CHECK_VALUE_GAUGE.labels(check=name).set(float(value))
    HEALTH_RUNS_TOTAL.labels(status=report.status.label).inc()


def build_client(ledger: LedgerSettings) -> SolanaRpcClient:
    limiter = RateLimiter.from_millis(ledger.min_delay_ms) if ledger.min_delay_ms > 0 else None
    return SolanaRpcClient(
        ledger.rpc_url,
        commitment=ledger.commitment,
        timeout=ledger.timeout_sec,
        limiter=limiter,
    )


async def run_health_check(
    settings: Settings | None = None,
    *,
    client: LedgerQueryClient | None = None,
    environ: dict[str, str] | None = None,
    env_file: str | None = ".env",
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> HealthReport:
    """Load configuration, run the battery and return a report. Never raises.

    Missing or invalid configuration yields a CRITICAL report listing every
    problem instead of an exception.
    """

    try:
        if settings is None:
            settings = load_settings(environ, env_file)
        targets = HealthTargets.from_settings(settings.ledger)
    except ConfigError as exc:
        LOGGER.error("health.config_invalid", extra={"errors": exc.errors})
        return HealthReport.critical(*exc.errors)
    except Exception as exc:
        LOGGER.exception("health.setup_failed")
        return HealthReport.critical(f"Unexpected error during health check: {exc}")

    try:
        if client is not None:
            return await _run(client, targets, settings, sleep)
        async with build_client(settings.ledger) as owned:
            return await _run(owned, targets, settings, sleep)
    except Exception as exc:
        LOGGER.exception("health.run_failed")
        return HealthReport.critical(f"Unexpected error during health check: {exc}")


async def _run(
    client: LedgerQueryClient,
    targets: HealthTargets,
    settings: Settings,
    sleep: Callable[[float], Awaitable[Any]],
) -> HealthReport:
    aggregator = HealthAggregator(
        client,
        targets,
        thresholds=settings.health,
        retry_policy=settings.retry.to_policy(),
        sleep=sleep,
    )
    return await aggregator.run()


__all__ = ["HealthAggregator", "build_client", "run_health_check"]
