from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

VARIABLES: tuple[str, ...] = ("temp", "hum", "co2", "pm1", "pm25", "pm10")


@dataclass(frozen=True)
class Sample:
    timestamp: str
    values: dict[str, float] = field(default_factory=dict)

    def get(self, variable: str) -> float | None:
        return self.values.get(variable)

    @property
    def clock(self) -> str:
        # "2024-01-01T08:05:00" -> "08:05"
        return self.timestamp[11:16]

    @property
    def day(self) -> str:
        return self.timestamp[:10]


@dataclass(frozen=True)
class KeyRange:
    """Inclusive interval over store keys in the `YYYY-MM-DDTHH:MM:SS` format."""

    start: str
    end: str

    def contains(self, key: str) -> bool:
        return self.start <= key <= self.end


@dataclass(frozen=True)
class RecordSet:
    records: dict[str, Any] = field(default_factory=dict)
    failure: str | None = None

    @classmethod
    def failed(cls, reason: str) -> RecordSet:
        return cls(records={}, failure=reason)
