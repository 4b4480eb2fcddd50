from __future__ import annotations

import asyncio

import pytest

from airboard.core.config import Settings
from airboard.models.channel import (
    CompareDays,
    DayMinMax,
    FilterInputs,
    HistoricalMinMax,
    OutOfRange,
    Range,
    Realtime,
    Tier,
)
from airboard.services.channels import mode_for_action
from airboard.services.dashboard import Dashboard
from tests.fakes import (
    FakeHistoryStore,
    RecordingChartSink,
    StaticBoardFeed,
    history_root,
    readings,
)

ROOT = history_root("esp32-1")


async def _until_fetched(store: FakeHistoryStore, count: int) -> None:
    while len(store.calls) < count:
        await asyncio.sleep(0)


async def test_selecting_a_board_renders_every_channel(
    dashboard: Dashboard, sink: RecordingChartSink
) -> None:
    await dashboard.registry.select("esp32-1")

    for variable in dashboard.controller.variables:
        channel = dashboard.controller.get(variable)
        assert isinstance(channel.mode, Realtime)
        assert channel.error is None
        assert sink.last(variable) is not None

    temp = dashboard.controller.get("temp")
    assert len(temp.series.labels) == 25
    assert temp.series.values[0][-1] == 34.5
    assert temp.tier is Tier.CRITICAL


async def test_reset_comes_before_every_render(
    dashboard: Dashboard, sink: RecordingChartSink
) -> None:
    await dashboard.registry.select("esp32-1")
    temp_events = [e for e in sink.events if e[1] == "temp"]
    assert [e[0] for e in temp_events] == ["reset", "render"]


async def test_compare_then_realtime_leaves_a_single_series(
    dashboard: Dashboard, store: FakeHistoryStore, sink: RecordingChartSink
) -> None:
    store.histories[ROOT].update(readings("2024-01-02", ["00:01", "00:02"], "temp", [30, 31]))
    await dashboard.registry.select("esp32-1")

    compared = await dashboard.controller.select_mode(
        "temp",
        CompareDays(day1="2024-01-01", day2="2024-01-02", start="00:00", end="00:05"),
    )
    assert len(compared.series.names) == 2
    assert compared.date_label == "2024-01-01 vs 2024-01-02"

    live = await dashboard.controller.select_mode("temp", Realtime())
    assert len(live.series.names) == 1
    assert live.series.names == ("TEMP",)
    _, _, _, values, names = sink.last("temp")
    assert names == ["TEMP"]
    assert len(values) == 1


async def test_failed_realtime_after_compare_still_leaves_a_single_series(
    dashboard: Dashboard, store: FakeHistoryStore, sink: RecordingChartSink
) -> None:
    await dashboard.registry.select("esp32-1")
    await dashboard.controller.select_mode(
        "temp",
        CompareDays(day1="2024-01-01", day2="2024-01-01", start="00:00", end="00:05"),
    )
    assert len(dashboard.controller.get("temp").series.names) == 2

    store.failing = True
    channel = await dashboard.controller.select_mode("temp", Realtime())

    assert isinstance(channel.mode, Realtime)
    assert channel.error == "transport_failure"
    assert channel.series.names == ("TEMP",)
    assert channel.series.labels == ()
    assert channel.date_label == ""
    assert sink.events[-1] == ("reset", "temp")


async def test_realtime_on_an_empty_history_resets_the_chart(
    dashboard: Dashboard, store: FakeHistoryStore, sink: RecordingChartSink
) -> None:
    store.histories[history_root("esp32-2")] = readings("2024-01-01", ["00:00"], "temp", [20])
    await dashboard.registry.select("esp32-2")
    await dashboard.controller.select_mode(
        "temp",
        CompareDays(day1="2024-01-01", day2="2024-01-01", start="00:00", end="00:05"),
    )

    store.histories[history_root("esp32-2")] = {}
    channel = await dashboard.controller.go_live("temp")

    assert channel.error == "no_data"
    assert channel.series.names == ("TEMP",)
    assert sink.events[-1] == ("reset", "temp")


async def test_failed_mode_keeps_the_previous_chart(
    dashboard: Dashboard, sink: RecordingChartSink
) -> None:
    await dashboard.registry.select("esp32-1")
    before = sink.last("temp")

    channel = await dashboard.controller.select_mode(
        "temp",
        CompareDays(day1="2024-01-01", day2="2023-12-31", start="00:00", end="00:05"),
    )

    assert channel.error == "no_data"
    assert isinstance(channel.mode, CompareDays)
    assert sink.last("temp") == before


async def test_errors_stay_on_their_channel(dashboard: Dashboard) -> None:
    await dashboard.registry.select("esp32-1")

    failed = await dashboard.controller.select_mode("pm25", OutOfRange())
    assert failed.error == "no_data"

    hum = dashboard.controller.get("hum")
    assert hum.error is None
    assert isinstance(hum.mode, Realtime)


async def test_transport_failure_is_recorded(
    dashboard: Dashboard, store: FakeHistoryStore
) -> None:
    await dashboard.registry.select("esp32-1")
    store.failing = True
    channel = await dashboard.controller.select_mode("temp", HistoricalMinMax())
    assert channel.error == "transport_failure"


async def test_mode_without_a_board(dashboard: Dashboard, store: FakeHistoryStore) -> None:
    channel = await dashboard.controller.select_mode("temp", HistoricalMinMax())
    assert channel.error == "no_board_selected"
    assert store.calls == []


async def test_clearing_filters_returns_to_realtime(
    dashboard: Dashboard, store: FakeHistoryStore
) -> None:
    await dashboard.registry.select("esp32-1")
    await dashboard.controller.update_filters(
        "temp", FilterInputs(day="2024-01-01", start="00:00", end="00:05")
    )
    ranged = await dashboard.controller.run_action("temp", "range")
    assert isinstance(ranged.mode, Range)
    assert ranged.series.labels == ("00:00", "00:01", "00:02", "00:03", "00:04", "00:05")

    calls = len(store.calls)
    cleared = await dashboard.controller.update_filters("temp", FilterInputs())
    assert isinstance(cleared.mode, Realtime)
    assert cleared.filters.is_empty()
    assert store.calls[calls:] == [(ROOT, None)]


async def test_partial_filters_do_not_fetch(
    dashboard: Dashboard, store: FakeHistoryStore
) -> None:
    await dashboard.registry.select("esp32-1")
    calls = len(store.calls)
    channel = await dashboard.controller.update_filters("temp", FilterInputs(day="2024-01-01"))
    assert channel.filters.day == "2024-01-01"
    assert len(store.calls) == calls


async def test_go_live_clears_filters(dashboard: Dashboard) -> None:
    await dashboard.registry.select("esp32-1")
    await dashboard.controller.update_filters("temp", FilterInputs(day="2024-01-01"))
    await dashboard.controller.run_action("temp", "min_max")

    channel = await dashboard.controller.go_live("temp")
    assert isinstance(channel.mode, Realtime)
    assert channel.filters == FilterInputs()
    assert channel.date_label == ""


async def test_latest_request_wins(
    dashboard: Dashboard, store: FakeHistoryStore, sink: RecordingChartSink
) -> None:
    await dashboard.registry.select("esp32-1")
    gate = store.hold("2024-01-01T00:00:00")
    calls = len(store.calls)

    slow = asyncio.create_task(
        dashboard.controller.select_mode("temp", Range(day="2024-01-01", start="00:00", end="00:05"))
    )
    await _until_fetched(store, calls + 1)
    fast = await dashboard.controller.select_mode(
        "temp", Range(day="2024-01-01", start="00:10", end="00:15")
    )
    gate.set()
    await slow

    channel = dashboard.controller.get("temp")
    assert channel == fast
    assert channel.series.labels[0] == "00:10"
    assert sink.last("temp")[2][0] == "00:10"


async def test_last_completion_policy_lets_late_results_through(
    settings: Settings, store: FakeHistoryStore
) -> None:
    sink = RecordingChartSink()
    dashboard = Dashboard(
        settings=settings.model_copy(update={"stale_response_policy": "last_completion"}),
        store=store,
        sink=sink,
        feed=StaticBoardFeed(),
    )
    await dashboard.registry.select("esp32-1")
    gate = store.hold("2024-01-01T00:00:00")
    calls = len(store.calls)

    slow = asyncio.create_task(
        dashboard.controller.select_mode("temp", Range(day="2024-01-01", start="00:00", end="00:05"))
    )
    await _until_fetched(store, calls + 1)
    await dashboard.controller.select_mode(
        "temp", Range(day="2024-01-01", start="00:10", end="00:15")
    )
    gate.set()
    await slow

    assert dashboard.controller.get("temp").series.labels[0] == "00:00"
    assert sink.last("temp")[2][0] == "00:00"


async def test_scheduler_path_skips_manual_channels(dashboard: Dashboard) -> None:
    await dashboard.registry.select("esp32-1")
    await dashboard.controller.select_mode("temp", HistoricalMinMax())
    samples = await dashboard.executor.load(ROOT)

    assert dashboard.controller.apply_realtime("temp", samples) is False
    assert dashboard.controller.apply_realtime("hum", samples) is True
    assert dashboard.controller.realtime_channels() == ["hum", "co2", "pm1", "pm25", "pm10"]


def test_unknown_channel(dashboard: Dashboard) -> None:
    with pytest.raises(KeyError):
        dashboard.controller.get("voc")


@pytest.mark.parametrize(
    ("action", "filters", "expected"),
    [
        ("realtime", FilterInputs(), Realtime()),
        ("min_max", FilterInputs(), HistoricalMinMax()),
        ("min_max", FilterInputs(day="2024-01-01"), DayMinMax(day="2024-01-01")),
        ("out_of_range", FilterInputs(), OutOfRange()),
        (
            "compare",
            FilterInputs(day="2024-01-01", day2="2024-01-02", start="08:00", end="09:00"),
            CompareDays(day1="2024-01-01", day2="2024-01-02", start="08:00", end="09:00"),
        ),
    ],
)
def test_mode_for_action(action: str, filters: FilterInputs, expected: object) -> None:
    assert mode_for_action(action, filters) == expected


@pytest.mark.parametrize("action", ["range", "average", "compare", "export"])
def test_mode_for_action_requires_inputs(action: str) -> None:
    with pytest.raises(ValueError):
        mode_for_action(action, FilterInputs(start="08:00"))
