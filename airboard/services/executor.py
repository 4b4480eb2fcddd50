from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

from airboard.core.errors import NoBoardSelected, NoData, TransportFailure
from airboard.models.channel import (
    CompareDays,
    DayAverage,
    DayMinMax,
    HistoricalMinMax,
    Mode,
    OutOfRange,
    Range,
    Realtime,
    Series,
)
from airboard.models.sample import KeyRange, Sample
from airboard.repositories.base import HistoryStore
from airboard.repositories.keys import day_range
from airboard.services.normalizer import normalize
from airboard.services.thresholds import is_out_of_range

REALTIME_WINDOW = 25
HISTORICAL_LABEL = "historical"
OUT_OF_RANGE_LABEL = "out of range"


@dataclass(frozen=True)
class ModeResult:
    series: Series
    status_value: float | None
    date_label: str


class ModeExecutor:
    """Fetches, normalizes and reduces history for one channel in one mode."""

    def __init__(self, *, store: HistoryStore, window: int = REALTIME_WINDOW) -> None:
        self._store = store
        self._window = window

    async def execute(self, variable: str, mode: Mode, root: str | None) -> ModeResult:
        if root is None:
            raise NoBoardSelected()

        if isinstance(mode, Realtime):
            return self.realtime(variable, await self.load(root))
        if isinstance(mode, Range):
            samples = await self.load(root, day_range(mode.day, mode.start, mode.end))
            return _range(variable, samples, date_label=mode.day)
        if isinstance(mode, DayAverage):
            return _day_average(variable, _on_day(await self.load(root), mode.day), mode.day)
        if isinstance(mode, DayMinMax):
            return _min_max(variable, _on_day(await self.load(root), mode.day), mode.day)
        if isinstance(mode, HistoricalMinMax):
            return _min_max(variable, await self.load(root), HISTORICAL_LABEL)
        if isinstance(mode, CompareDays):
            return await self._compare_days(variable, mode, root)
        if isinstance(mode, OutOfRange):
            return _out_of_range(variable, await self.load(root))
        raise TypeError(f"Unsupported mode: {mode!r}")

    async def load(self, root: str, key_range: KeyRange | None = None) -> list[Sample]:
        record_set = await self._store.fetch(root, key_range)
        if record_set.failure is not None:
            raise TransportFailure(record_set.failure)
        return normalize(record_set.records)

    def realtime(self, variable: str, samples: Sequence[Sample]) -> ModeResult:
        window = list(samples)[-self._window :]
        if not window:
            raise NoData()
        values = tuple(s.get(variable) for s in window)
        return ModeResult(
            series=Series(
                labels=tuple(s.clock for s in window),
                names=(variable.upper(),),
                values=(values,),
            ),
            status_value=values[-1],
            date_label="",
        )

    async def _compare_days(self, variable: str, mode: CompareDays, root: str) -> ModeResult:
        first, second = await asyncio.gather(
            self.load(root, day_range(mode.day1, mode.start, mode.end)),
            self.load(root, day_range(mode.day2, mode.start, mode.end)),
        )
        if not first or not second:
            raise NoData("No data for one of the days")

        first_values = tuple(s.get(variable) for s in first)
        return ModeResult(
            series=Series(
                labels=tuple(s.clock for s in first),
                names=(mode.day1, mode.day2),
                values=(first_values, tuple(s.get(variable) for s in second)),
            ),
            status_value=first_values[-1],
            date_label=f"{mode.day1} vs {mode.day2}",
        )


def _on_day(samples: Sequence[Sample], day: str) -> list[Sample]:
    return [s for s in samples if s.day == day]


def _numbers(variable: str, samples: Sequence[Sample]) -> list[float]:
    return [v for v in (s.get(variable) for s in samples) if v is not None]


def _range(variable: str, samples: Sequence[Sample], *, date_label: str) -> ModeResult:
    if not samples:
        raise NoData()
    values = tuple(s.get(variable) for s in samples)
    return ModeResult(
        series=Series(
            labels=tuple(s.clock for s in samples),
            names=(variable.upper(),),
            values=(values,),
        ),
        status_value=values[-1],
        date_label=date_label,
    )


def _day_average(variable: str, samples: Sequence[Sample], day: str) -> ModeResult:
    values = _numbers(variable, samples)
    if not values:
        raise NoData()
    mean = sum(values) / len(values)
    return ModeResult(
        series=Series(labels=("avg",), names=(variable.upper(),), values=((round(mean, 2),),)),
        status_value=mean,
        date_label=day,
    )


def _min_max(variable: str, samples: Sequence[Sample], date_label: str) -> ModeResult:
    values = _numbers(variable, samples)
    if not values:
        raise NoData()
    low, high = min(values), max(values)
    return ModeResult(
        series=Series(labels=("min", "max"), names=(variable.upper(),), values=((low, high),)),
        status_value=high,
        date_label=date_label,
    )


def _out_of_range(variable: str, samples: Sequence[Sample]) -> ModeResult:
    flagged = [s for s in samples if is_out_of_range(variable, s.get(variable))]
    if not flagged:
        raise NoData("No out-of-range values detected")
    return _range(variable, flagged, date_label=OUT_OF_RANGE_LABEL)
