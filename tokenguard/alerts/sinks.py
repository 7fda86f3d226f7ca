"""Hand-off points for alert decisions.

Sinks only deliver; whether and at what level to alert is decided upstream by
:class:`~tokenguard.alerts.decider.AlertDecider`.
"""

from __future__ import annotations

import json
import logging
import socket
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, Iterable

from .decider import AlertDecision, AlertLevel

LOGGER = logging.getLogger(__name__)

_LOG_LEVELS = {
    AlertLevel.INFO.value: logging.INFO,
    AlertLevel.WARN.value: logging.WARNING,
    AlertLevel.CRITICAL.value: logging.CRITICAL,
}


@dataclass
class Event:
    kind: str
    severity: str
    title: str
    detail: str = ""
    ts: float = 0.0
    tags: Dict[str, str] = field(default_factory=dict)

    def stamped(self) -> "Event":
        if self.ts <= 0.0:
            self.ts = time.time()
        return self

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False, sort_keys=True)


def event_from_decision(decision: AlertDecision, *, host: str | None = None) -> Event:
    return Event(
        kind="health",
        severity=decision.level.value,
        title=decision.title,
        detail=decision.detail,
        tags={"status": decision.status.label, "host": host or socket.gethostname()},
    )


class Sink(ABC):
    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def send(self, event: Event) -> bool:
        """Return ``True`` once the event has been handed off."""


class LoggingSink(Sink):
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or LOGGER

    def send(self, event: Event) -> bool:
        level = _LOG_LEVELS.get(event.severity, logging.WARNING)
        self._logger.log(level, "ALERT: %s - %s: %s", event.severity, event.title, event.detail)
        return True


class FileSink(Sink):
    """Append events to a JSON-lines file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._write_lock = threading.Lock()

    def send(self, event: Event) -> bool:
        record = event.to_json() + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._write_lock, self._path.open("a", encoding="utf-8") as stream:
                stream.write(record)
        except OSError:
            LOGGER.exception("alerts.file_sink_failed", extra={"path": str(self._path)})
            return False
        return True


def dispatch(event: Event, sinks: Iterable[Sink]) -> dict[str, bool]:
    """Send ``event`` to every sink; one failing sink does not stop the rest."""

    event.stamped()
    delivered: dict[str, bool] = {}
    for sink in sinks:
        try:
            delivered[sink.name] = bool(sink.send(event))
        except Exception:
            LOGGER.exception("alerts.sink_failed", extra={"sink": sink.name})
            delivered[sink.name] = False
    return delivered


__all__ = ["Event", "FileSink", "LoggingSink", "Sink", "dispatch", "event_from_decision"]
