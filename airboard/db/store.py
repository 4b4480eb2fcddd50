from __future__ import annotations

from influxdb_client import InfluxDBClient

from airboard.clients.rtdb import RtdbClient
from airboard.core.config import Settings
from airboard.repositories.base import HistoryStore
from airboard.repositories.history import RtdbHistoryStore
from airboard.repositories.history_influx import InfluxHistoryStore


def create_influx_client(settings: Settings) -> InfluxDBClient:
    return InfluxDBClient(
        url=str(settings.influx_url),
        token=settings.influx_token,
        org=settings.influx_org,
        timeout=settings.influx_timeout_ms,
    )


def create_history_store(settings: Settings) -> HistoryStore:
    if settings.store_backend == "influx":
        return InfluxHistoryStore(
            client=create_influx_client(settings),
            org=settings.influx_org,
            bucket=settings.influx_bucket,
            measurement=settings.influx_measurement,
            board_tag=settings.influx_board_tag,
            path_template=settings.history_path_template,
        )
    return RtdbHistoryStore(
        client=RtdbClient(
            base_url=str(settings.store_url),
            timeout_seconds=settings.store_timeout_seconds,
            auth_token=settings.store_auth_token,
        ),
        data_root=settings.data_root,
        boards_path=settings.boards_path,
    )
