from __future__ import annotations

from dataclasses import asdict
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from airboard.models.channel import (
    Channel,
    CompareDays,
    DayAverage,
    DayMinMax,
    FilterInputs,
    HistoricalMinMax,
    Mode,
    OutOfRange,
    Range,
    Realtime,
    Tier,
)
from airboard.services.thresholds import status_slot

DAY_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
CLOCK_PATTERN = r"^\d{2}:\d{2}$"

Day = Annotated[str, Field(pattern=DAY_PATTERN)]
Clock = Annotated[str, Field(pattern=CLOCK_PATTERN)]
OptionalDay = Annotated[str, Field(pattern=r"^(\d{4}-\d{2}-\d{2})?$")]
OptionalClock = Annotated[str, Field(pattern=r"^(\d{2}:\d{2})?$")]


class RealtimeRequest(BaseModel):
    kind: Literal["realtime"]

    def to_mode(self) -> Mode:
        return Realtime()


class RangeRequest(BaseModel):
    kind: Literal["range"]
    day: Day
    start: Clock
    end: Clock

    def to_mode(self) -> Mode:
        return Range(day=self.day, start=self.start, end=self.end)


class DayAverageRequest(BaseModel):
    kind: Literal["day_average"]
    day: Day

    def to_mode(self) -> Mode:
        return DayAverage(day=self.day)


class DayMinMaxRequest(BaseModel):
    kind: Literal["day_min_max"]
    day: Day

    def to_mode(self) -> Mode:
        return DayMinMax(day=self.day)


class HistoricalMinMaxRequest(BaseModel):
    kind: Literal["historical_min_max"]

    def to_mode(self) -> Mode:
        return HistoricalMinMax()


class CompareDaysRequest(BaseModel):
    kind: Literal["compare_days"]
    day1: Day
    day2: Day
    start: Clock
    end: Clock

    def to_mode(self) -> Mode:
        return CompareDays(day1=self.day1, day2=self.day2, start=self.start, end=self.end)


class OutOfRangeRequest(BaseModel):
    kind: Literal["out_of_range"]

    def to_mode(self) -> Mode:
        return OutOfRange()


ModeRequest = Annotated[
    Union[
        RealtimeRequest,
        RangeRequest,
        DayAverageRequest,
        DayMinMaxRequest,
        HistoricalMinMaxRequest,
        CompareDaysRequest,
        OutOfRangeRequest,
    ],
    Field(discriminator="kind"),
]


class FiltersRequest(BaseModel):
    day: OptionalDay = ""
    day2: OptionalDay = ""
    start: OptionalClock = ""
    end: OptionalClock = ""

    def to_filters(self) -> FilterInputs:
        return FilterInputs(day=self.day, day2=self.day2, start=self.start, end=self.end)


class SeriesRead(BaseModel):
    name: str
    values: list[float | None]


class ChannelRead(BaseModel):
    variable: str
    mode: str
    params: dict[str, str] = Field(default_factory=dict)
    auto_refresh: bool
    tier: Tier | None = None
    status_slot: str
    date_label: str = ""
    error: str | None = None
    labels: list[str] = Field(default_factory=list)
    series: list[SeriesRead] = Field(default_factory=list)
    filters: FiltersRequest = Field(default_factory=FiltersRequest)

    @classmethod
    def from_channel(cls, channel: Channel) -> ChannelRead:
        return cls(
            variable=channel.variable,
            mode=channel.mode.kind,
            params=asdict(channel.mode),
            auto_refresh=channel.mode.auto_refresh,
            tier=channel.tier,
            status_slot=status_slot(channel.variable),
            date_label=channel.date_label,
            error=channel.error,
            labels=list(channel.series.labels),
            series=[
                SeriesRead(name=name, values=list(values))
                for name, values in zip(channel.series.names, channel.series.values)
            ],
            filters=FiltersRequest.model_validate(asdict(channel.filters)),
        )


class ChartRead(BaseModel):
    variable: str
    revision: int = Field(ge=0)
    labels: list[str]
    series: list[SeriesRead]


class ThresholdRead(BaseModel):
    variable: str
    floor: float
    normal_ceiling: float
    warn_ceiling: float
    status_slot: str
    legend: dict[Tier, str]
