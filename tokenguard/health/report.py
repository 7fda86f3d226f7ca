from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Union

from .status import HealthStatus

CheckValue = Union[bool, int, float]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class HealthReport:
    """Result of one health run.

    ``status`` only ever moves up the severity order while the report is
    being assembled.
    """

    timestamp: str = field(default_factory=utc_timestamp)
    status: HealthStatus = HealthStatus.HEALTHY
    checks: Dict[str, CheckValue] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def critical(cls, *errors: str, timestamp: str | None = None) -> "HealthReport":
        report = cls(timestamp=timestamp or utc_timestamp())
        for message in errors:
            report.add_error(message)
        if not errors:
            report.escalate(HealthStatus.CRITICAL)
        return report

    @property
    def exit_code(self) -> int:
        return self.status.exit_code

    def escalate(self, level: HealthStatus) -> None:
        self.status = self.status.combine(level)

    def add_error(self, message: str, level: HealthStatus = HealthStatus.CRITICAL) -> None:
        self.errors.append(message)
        self.escalate(level)

    def add_warning(self, message: str, *, escalate: bool = True) -> None:
        self.warnings.append(message)
        if escalate:
            self.escalate(HealthStatus.WARNING)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "status": self.status.label,
            "checks": dict(self.checks),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


__all__ = ["CheckValue", "HealthReport", "utc_timestamp"]
