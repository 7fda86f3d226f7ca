"""Decide whether a health report warrants an alert, and at what level.

Alerts for consecutive unhealthy runs are suppressed for ``min_interval``
seconds after the last one was sent. A healthy run clears the suppression
state so the next degradation alerts immediately. The last-sent timestamp is
stored in a small JSON file so separate cron-driven processes share it.
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from ..health.report import HealthReport
from ..health.status import HealthStatus
from ..metrics import ALERTS_TOTAL

LOGGER = logging.getLogger(__name__)

MAX_MESSAGE_ITEMS = 5


class AlertLevel(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    CRITICAL = "CRITICAL"


def level_for_status(status: HealthStatus) -> AlertLevel | None:
    if status is HealthStatus.CRITICAL:
        return AlertLevel.CRITICAL
    if status is HealthStatus.WARNING:
        return AlertLevel.WARN
    return None


@dataclass(frozen=True)
class AlertDecision:
    level: AlertLevel
    status: HealthStatus
    title: str
    detail: str


def _summarise(items: list[str]) -> str:
    shown = items[:MAX_MESSAGE_ITEMS]
    text = "; ".join(shown)
    if len(items) > len(shown):
        text = f"{text}; (+{len(items) - len(shown)} more)"
    return text


def describe(report: HealthReport) -> tuple[str, str]:
    if report.status is HealthStatus.CRITICAL:
        return "Health check failed", _summarise(report.errors or report.warnings)
    return "Health check warnings", _summarise(report.warnings or report.errors)


class AlertState:
    """JSON file holding the timestamp of the last alert sent."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def last_sent(self) -> float | None:
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            LOGGER.warning("alerts.state_unreadable path=%s", self._path, exc_info=True)
            return None
        value = payload.get("last_alert_ts") if isinstance(payload, dict) else None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        return None

    def record(self, ts: float) -> bool:
        """Persist ``ts``; an unwritable path is logged and reported as ``False``."""

        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps({"last_alert_ts": ts}), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError:
            LOGGER.exception("alerts.state_write_failed", extra={"path": str(self._path)})
            return False
        return True

    def clear(self) -> bool:
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            LOGGER.exception("alerts.state_write_failed", extra={"path": str(self._path)})
            return False
        return True


class AlertDecider:
    def __init__(
        self,
        state: AlertState,
        *,
        min_interval: float = 3600.0,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._state = state
        self._min_interval = float(min_interval)
        self._clock = clock or time.time

    def decide(self, report: HealthReport) -> AlertDecision | None:
        level = level_for_status(report.status)
        if level is None:
            self._state.clear()
            return None
        now = self._clock()
        last = self._state.last_sent()
        if last is not None and now - last < self._min_interval:
            ALERTS_TOTAL.labels(level=level.value, outcome="suppressed").inc()
            LOGGER.info(
                "alerts.suppressed",
                extra={"level": level.value, "since_last": now - last},
            )
            return None
        self._state.record(now)
        ALERTS_TOTAL.labels(level=level.value, outcome="sent").inc()
        title, detail = describe(report)
        return AlertDecision(level=level, status=report.status, title=title, detail=detail)


__all__ = [
    "AlertDecider",
    "AlertDecision",
    "AlertLevel",
    "AlertState",
    "describe",
    "level_for_status",
]
