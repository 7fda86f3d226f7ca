"""Periodic health monitoring with alert suppression.

Meant to run from cron (``--once``, the default) or as a long-lived process
(``--loop``). Each cycle runs the health battery, decides whether an alert is
due and hands it to the configured sinks.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any, Awaitable, Callable, Sequence

from ..alerts.decider import AlertDecider, AlertState
from ..alerts.sinks import FileSink, LoggingSink, Sink, dispatch, event_from_decision
from ..config.loader import ConfigError, load_alert_settings
from ..config.schema import AlertSettings
from ..health.aggregator import run_health_check
from ..health.report import HealthReport
from ..util.env import get_optional_env
from ..util.logging import setup_logging

LOGGER = logging.getLogger(__name__)

DEFAULT_INTERVAL_SEC = 300.0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Token policy health monitor")
    parser.add_argument("--env-file", default=".env", help="dotenv file with RPC and key settings")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="run a single cycle (default)")
    mode.add_argument("--loop", action="store_true", help="run until interrupted")
    parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_INTERVAL_SEC,
        help=f"seconds between cycles in --loop mode (default: {DEFAULT_INTERVAL_SEC:g})",
    )
    parser.add_argument(
        "--cycles",
        type=int,
        default=0,
        help="optional number of cycles before exiting in --loop mode (0 runs indefinitely)",
    )
    parser.add_argument("--log-level", default=None, help="log level (default: LOG_LEVEL env or INFO)")
    return parser


def build_sinks(settings: AlertSettings) -> list[Sink]:
    sinks: list[Sink] = [LoggingSink()]
    if settings.log_path is not None:
        sinks.append(FileSink(settings.log_path))
    return sinks


class Monitor:
    def __init__(
        self,
        decider: AlertDecider,
        sinks: Sequence[Sink],
        health: Callable[[], Awaitable[HealthReport]],
    ) -> None:
        self._decider = decider
        self._sinks = list(sinks)
        self._health = health

    async def run_cycle(self) -> HealthReport:
        report = await self._health()
        LOGGER.info(
            "monitor.health status=%s errors=%d warnings=%d",
            report.status.label,
            len(report.errors),
            len(report.warnings),
        )
        decision = self._decider.decide(report)
        if decision is not None:
            dispatch(event_from_decision(decision), self._sinks)
        return report

    async def run_forever(
        self,
        interval: float,
        *,
        cycles: int = 0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> HealthReport:
        completed = 0
        while True:
            report = await self.run_cycle()
            completed += 1
            if cycles and completed >= cycles:
                return report
            await sleep(interval)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(args.log_level or get_optional_env("LOG_LEVEL", "INFO"))
    env_file = args.env_file or None
    try:
        alert_settings = load_alert_settings(env_file=env_file)
    except ConfigError as exc:
        LOGGER.error("monitor.alert_config_invalid: %s", exc)
        alert_settings = AlertSettings()

    decider = AlertDecider(
        AlertState(alert_settings.state_path),
        min_interval=alert_settings.min_interval_sec,
    )
    monitor = Monitor(
        decider,
        build_sinks(alert_settings),
        lambda: run_health_check(env_file=env_file),
    )
    try:
        if args.loop:
            report = asyncio.run(monitor.run_forever(args.interval, cycles=args.cycles))
        else:
            report = asyncio.run(monitor.run_cycle())
    except KeyboardInterrupt:
        LOGGER.info("monitor interrupted")
        return 0
    return report.exit_code


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
