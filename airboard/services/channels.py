from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Literal

from airboard.core.errors import AirboardError, NoData, TransportFailure
from airboard.core.logging import board_context, get_logger
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
    Series,
)
from airboard.models.sample import VARIABLES, Sample
from airboard.services.charts import ChartSink
from airboard.services.executor import ModeExecutor, ModeResult
from airboard.services.selection import BoardSelection
from airboard.services.thresholds import evaluate

if TYPE_CHECKING:
    from airboard.services.scheduler import RefreshScheduler

logger = get_logger(__name__)

StalePolicy = Literal["last_request", "last_completion"]

ACTIONS = ("realtime", "range", "average", "min_max", "compare", "out_of_range")


def mode_for_action(action: str, filters: FilterInputs) -> Mode:
    """Translate a dashboard button press plus the channel's filter inputs into a mode."""
    if action == "realtime":
        return Realtime()
    if action == "range":
        if not (filters.day and filters.start and filters.end):
            raise ValueError("Select a date and a time range")
        return Range(day=filters.day, start=filters.start, end=filters.end)
    if action == "average":
        if not filters.day:
            raise ValueError("Select a date")
        return DayAverage(day=filters.day)
    if action == "min_max":
        # Without a date the whole history is scanned.
        if filters.day:
            return DayMinMax(day=filters.day)
        return HistoricalMinMax()
    if action == "compare":
        if not (filters.day and filters.day2 and filters.start and filters.end):
            raise ValueError("Select both days and a time range")
        return CompareDays(
            day1=filters.day, day2=filters.day2, start=filters.start, end=filters.end
        )
    if action == "out_of_range":
        return OutOfRange()
    raise ValueError(f"Unknown action: {action}")


class ChannelController:
    def __init__(
        self,
        *,
        executor: ModeExecutor,
        sink: ChartSink,
        selection: BoardSelection,
        root_timeout_seconds: float = 6.0,
        policy: StalePolicy = "last_request",
        variables: Iterable[str] = VARIABLES,
    ) -> None:
        self._executor = executor
        self._sink = sink
        self._selection = selection
        self._root_timeout_seconds = root_timeout_seconds
        self._policy = policy
        self._channels: dict[str, Channel] = {v: Channel.initial(v) for v in variables}
        self._scheduler: RefreshScheduler | None = None

    def attach_scheduler(self, scheduler: RefreshScheduler) -> None:
        self._scheduler = scheduler

    @property
    def variables(self) -> list[str]:
        return list(self._channels)

    def get(self, variable: str) -> Channel:
        try:
            return self._channels[variable]
        except KeyError:
            raise KeyError(f"Unknown channel: {variable}") from None

    def snapshot(self) -> dict[str, Channel]:
        return dict(self._channels)

    def realtime_channels(self) -> list[str]:
        return [v for v, c in self._channels.items() if c.mode.auto_refresh]

    async def select_mode(self, variable: str, mode: Mode) -> Channel:
        current = self.get(variable)
        requested = self._transition(
            variable, mode=mode, generation=current.generation + 1, error=None
        )
        root = await self._selection.wait_root(self._root_timeout_seconds)
        with board_context(root, variable=variable):
            try:
                result = await self._executor.execute(variable, mode, root)
            except AirboardError as e:
                return self._fail(variable, requested.generation, mode, e)
            return self._apply(variable, requested.generation, result)

    async def run_action(self, variable: str, action: str) -> Channel:
        mode = mode_for_action(action, self.get(variable).filters)
        return await self.select_mode(variable, mode)

    async def update_filters(self, variable: str, filters: FilterInputs) -> Channel:
        channel = self._transition(variable, filters=filters)
        if filters.is_empty():
            logger.info("channel.filters_cleared", variable=variable)
            return await self.select_mode(variable, Realtime())
        return channel

    async def go_live(self, variable: str) -> Channel:
        self._transition(variable, filters=FilterInputs(), date_label="")
        channel = await self.select_mode(variable, Realtime())
        if self._scheduler is not None:
            self._scheduler.start()
        return channel

    async def reset_all(self) -> dict[str, Channel]:
        await asyncio.gather(*(self.select_mode(v, Realtime()) for v in self._channels))
        return self.snapshot()

    def apply_realtime(self, variable: str, samples: Sequence[Sample]) -> bool:
        """Scheduler path: re-render a channel only while it is still in realtime mode."""
        channel = self.get(variable)
        if not channel.mode.auto_refresh:
            return False
        try:
            result = self._executor.realtime(variable, samples)
        except NoData:
            return False
        self._apply(variable, channel.generation, result)
        return True

    def _commit(self, channel: Channel) -> Channel:
        self._channels[channel.variable] = channel
        return channel

    def _transition(self, variable: str, **changes: Any) -> Channel:
        return self._commit(replace(self.get(variable), **changes))

    def _is_stale(self, variable: str, generation: int) -> bool:
        return self._policy == "last_request" and self._channels[variable].generation != generation

    def _apply(self, variable: str, generation: int, result: ModeResult) -> Channel:
        if self._is_stale(variable, generation):
            logger.debug("channel.stale_result_discarded", variable=variable, generation=generation)
            return self._channels[variable]

        current = self._channels[variable]
        channel = self._transition(
            variable,
            series=result.series,
            tier=evaluate(variable, result.status_value) or current.tier,
            date_label=result.date_label,
            error=None,
        )
        self._sink.reset(variable)
        self._sink.render(
            variable, result.series.labels, result.series.values, result.series.names
        )
        return channel

    def _fail(self, variable: str, generation: int, mode: Mode, error: AirboardError) -> Channel:
        if self._is_stale(variable, generation):
            return self._channels[variable]

        log = logger.warning if isinstance(error, TransportFailure) else logger.info
        log("channel.mode_failed", variable=variable, mode=mode.kind, kind=error.kind, detail=str(error))
        if isinstance(mode, Realtime):
            # Going live always clears the chart, even when no data comes back.
            self._sink.reset(variable)
            return self._transition(
                variable,
                series=Series.baseline(variable.upper()),
                date_label="",
                error=error.kind,
            )
        return self._transition(variable, error=error.kind)
