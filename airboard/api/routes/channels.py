from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, HTTPException, status

from airboard.api.deps import DashboardDep, ReadUser, WriteUser
from airboard.api.errors import http_error
from airboard.models.channel import Channel
from airboard.schemas.channels import (
    ChannelRead,
    ChartRead,
    FiltersRequest,
    ModeRequest,
    SeriesRead,
)
from airboard.services.channels import ACTIONS
from airboard.services.charts import MemoryChartSink
from airboard.services.dashboard import Dashboard

router = APIRouter()


def _channel(dashboard: Dashboard, variable: str) -> Channel:
    try:
        return dashboard.controller.get(variable)
    except KeyError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Unknown channel"
        ) from e


def _read(channel: Channel) -> ChannelRead:
    if channel.error is not None:
        raise http_error(channel.error)
    return ChannelRead.from_channel(channel)


@router.get("/channels", response_model=list[ChannelRead])
async def list_channels(_: ReadUser, dashboard: DashboardDep) -> list[ChannelRead]:
    return [ChannelRead.from_channel(c) for c in dashboard.controller.snapshot().values()]


@router.get("/channels/{variable}", response_model=ChannelRead)
async def read_channel(_: ReadUser, variable: str, dashboard: DashboardDep) -> ChannelRead:
    return ChannelRead.from_channel(_channel(dashboard, variable))


@router.post("/channels/{variable}/mode", response_model=ChannelRead)
async def select_mode(
    _: WriteUser,
    variable: str,
    payload: Annotated[ModeRequest, Body()],
    dashboard: DashboardDep,
) -> ChannelRead:
    _channel(dashboard, variable)
    return _read(await dashboard.controller.select_mode(variable, payload.to_mode()))


@router.post("/channels/{variable}/filters", response_model=ChannelRead)
async def update_filters(
    _: WriteUser,
    variable: str,
    payload: FiltersRequest,
    dashboard: DashboardDep,
) -> ChannelRead:
    _channel(dashboard, variable)
    filters = payload.to_filters()
    channel = await dashboard.controller.update_filters(variable, filters)
    if filters.is_empty():
        return _read(channel)
    return ChannelRead.from_channel(channel)


@router.post("/channels/{variable}/actions/{action}", response_model=ChannelRead)
async def run_action(
    _: WriteUser,
    variable: str,
    action: str,
    dashboard: DashboardDep,
) -> ChannelRead:
    _channel(dashboard, variable)
    if action not in ACTIONS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown action")
    try:
        channel = await dashboard.controller.run_action(variable, action)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _read(channel)


@router.post("/channels/{variable}/live", response_model=ChannelRead)
async def go_live(_: WriteUser, variable: str, dashboard: DashboardDep) -> ChannelRead:
    _channel(dashboard, variable)
    return _read(await dashboard.controller.go_live(variable))


@router.get("/charts/{variable}", response_model=ChartRead)
async def read_chart(_: ReadUser, variable: str, dashboard: DashboardDep) -> ChartRead:
    _channel(dashboard, variable)
    sink = dashboard.sink
    frame = sink.frame(variable) if isinstance(sink, MemoryChartSink) else None
    if frame is None:
        return ChartRead(
            variable=variable,
            revision=0,
            labels=[],
            series=[SeriesRead(name=variable.upper(), values=[])],
        )
    return ChartRead(
        variable=variable,
        revision=frame.revision,
        labels=frame.labels,
        series=[SeriesRead(name=n, values=v) for n, v in zip(frame.names, frame.values)],
    )
