from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union


class Tier(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Realtime:
    kind: ClassVar[str] = "realtime"
    auto_refresh: ClassVar[bool] = True


@dataclass(frozen=True)
class Range:
    kind: ClassVar[str] = "range"
    auto_refresh: ClassVar[bool] = False

    day: str
    start: str
    end: str


@dataclass(frozen=True)
class DayAverage:
    kind: ClassVar[str] = "day_average"
    auto_refresh: ClassVar[bool] = False

    day: str


@dataclass(frozen=True)
class DayMinMax:
    kind: ClassVar[str] = "day_min_max"
    auto_refresh: ClassVar[bool] = False

    day: str


@dataclass(frozen=True)
class HistoricalMinMax:
    kind: ClassVar[str] = "historical_min_max"
    auto_refresh: ClassVar[bool] = False


@dataclass(frozen=True)
class CompareDays:
    kind: ClassVar[str] = "compare_days"
    auto_refresh: ClassVar[bool] = False

    day1: str
    day2: str
    start: str
    end: str


@dataclass(frozen=True)
class OutOfRange:
    kind: ClassVar[str] = "out_of_range"
    auto_refresh: ClassVar[bool] = False


Mode = Union[Realtime, Range, DayAverage, DayMinMax, HistoricalMinMax, CompareDays, OutOfRange]


@dataclass(frozen=True)
class Series:
    labels: tuple[str, ...] = ()
    names: tuple[str, ...] = ("",)
    values: tuple[tuple[float | None, ...], ...] = ((),)

    @classmethod
    def baseline(cls, name: str) -> Series:
        return cls(labels=(), names=(name,), values=((),))


@dataclass(frozen=True)
class FilterInputs:
    day: str = ""
    day2: str = ""
    start: str = ""
    end: str = ""

    def is_empty(self) -> bool:
        return not (self.day or self.day2 or self.start or self.end)


@dataclass(frozen=True)
class Channel:
    variable: str
    mode: Mode = field(default_factory=Realtime)
    series: Series = field(default_factory=Series)
    tier: Tier | None = None
    date_label: str = ""
    filters: FilterInputs = field(default_factory=FilterInputs)
    generation: int = 0
    error: str | None = None

    @classmethod
    def initial(cls, variable: str) -> Channel:
        return cls(variable=variable, series=Series.baseline(variable.upper()))
