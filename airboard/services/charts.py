from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol


class ChartSink(Protocol):
    def render(
        self,
        channel_id: str,
        labels: Sequence[str],
        values: Sequence[Sequence[float | None]],
        names: Sequence[str],
    ) -> None: ...

    def reset(self, channel_id: str) -> None: ...


@dataclass(frozen=True)
class ChartFrame:
    labels: list[str]
    names: list[str]
    values: list[list[float | None]]
    revision: int


class MemoryChartSink:
    """Keeps the latest frame per channel for clients that poll the API."""

    def __init__(self) -> None:
        self._frames: dict[str, ChartFrame] = {}

    def render(
        self,
        channel_id: str,
        labels: Sequence[str],
        values: Sequence[Sequence[float | None]],
        names: Sequence[str],
    ) -> None:
        self._frames[channel_id] = ChartFrame(
            labels=list(labels),
            names=list(names),
            values=[list(v) for v in values],
            revision=self._next_revision(channel_id),
        )

    def reset(self, channel_id: str) -> None:
        self._frames[channel_id] = ChartFrame(
            labels=[],
            names=[channel_id.upper()],
            values=[[]],
            revision=self._next_revision(channel_id),
        )

    def frame(self, channel_id: str) -> ChartFrame | None:
        return self._frames.get(channel_id)

    def _next_revision(self, channel_id: str) -> int:
        current = self._frames.get(channel_id)
        return 1 if current is None else current.revision + 1
