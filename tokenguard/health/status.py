from __future__ import annotations

import enum
from functools import reduce
from typing import Iterable


class HealthStatus(enum.IntEnum):
    """Ordered severity; the integer value doubles as the process exit code."""

    HEALTHY = 0
    WARNING = 1
    CRITICAL = 2

    @property
    def label(self) -> str:
        return self.name.lower()

    @property
    def exit_code(self) -> int:
        return int(self)

    def combine(self, other: "HealthStatus") -> "HealthStatus":
        return self if self >= other else HealthStatus(other)

    @classmethod
    def worst(cls, statuses: Iterable["HealthStatus"]) -> "HealthStatus":
        return reduce(lambda acc, item: acc.combine(item), statuses, cls.HEALTHY)

    @classmethod
    def from_label(cls, value: "HealthStatus | str") -> "HealthStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown health status: {value!r}") from exc


__all__ = ["HealthStatus"]
