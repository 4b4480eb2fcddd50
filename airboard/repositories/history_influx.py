from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any

from influxdb_client import InfluxDBClient

from airboard.core.logging import get_logger
from airboard.models.sample import VARIABLES, KeyRange, RecordSet
from airboard.repositories.keys import from_key, to_key

logger = get_logger(__name__)


def flux_str(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def flux_time(key: str) -> str:
    return f"time(v: {flux_str(to_key(from_key(key)) + 'Z')})"


class InfluxHistoryStore:
    """The same key-ordered history contract, served from an InfluxDB bucket.

    One point per reading, tagged with the board id, one field per variable.
    Rows are pivoted back into `{key: {variable: value}}` records.
    """

    def __init__(
        self,
        *,
        client: InfluxDBClient,
        org: str,
        bucket: str,
        measurement: str,
        board_tag: str,
        path_template: str,
    ) -> None:
        self._client = client
        self._org = org
        self._bucket = bucket
        self._measurement = measurement
        self._board_tag = board_tag
        self._prefix, _, self._suffix = path_template.partition("{board}")

    async def ping(self) -> None:
        await asyncio.to_thread(self._client.ping)

    async def close(self) -> None:
        self._client.close()

    def board_for(self, root: str) -> str:
        if root.startswith(self._prefix) and root.endswith(self._suffix):
            return root[len(self._prefix) : len(root) - len(self._suffix)]
        return root

    async def fetch(self, root: str, key_range: KeyRange | None = None) -> RecordSet:
        board = self.board_for(root)
        try:
            records = await asyncio.to_thread(self._query_records, board, key_range)
        except Exception as e:  # noqa: BLE001 - any client failure reads as "no data"
            logger.warning("history.fetch_failed", root=root, error=str(e))
            return RecordSet.failed(f"{type(e).__name__}: {e}")
        return RecordSet(records=records)

    async def list_boards(self) -> list[str] | None:
        try:
            return await asyncio.to_thread(self._query_boards)
        except Exception as e:  # noqa: BLE001
            logger.warning("history.boards_failed", error=str(e))
            return None

    async def list_history_keys(self) -> list[str]:
        boards = await self.list_boards()
        return boards or []

    def build_query(self, board: str, key_range: KeyRange | None) -> str:
        if key_range is None:
            time_range = "start: 0"
        else:
            # Key ranges are inclusive; Flux stop is exclusive.
            stop = to_key(from_key(key_range.end) + timedelta(seconds=1))
            time_range = f"start: {flux_time(key_range.start)}, stop: {flux_time(stop)}"

        field_predicate = " or ".join([f'r["_field"] == {flux_str(v)}' for v in VARIABLES])
        return f"""
from(bucket: {flux_str(self._bucket)})
  |> range({time_range})
  |> filter(fn: (r) => r["_measurement"] == {flux_str(self._measurement)})
  |> filter(fn: (r) => r[{flux_str(self._board_tag)}] == {flux_str(board)})
  |> filter(fn: (r) => {field_predicate})
  |> pivot(rowKey: ["_time"], columnKey: ["_field"], valueColumn: "_value")
  |> group()
  |> sort(columns: ["_time"])
"""

    def _query_records(self, board: str, key_range: KeyRange | None) -> dict[str, Any]:
        query_api = self._client.query_api()
        tables = query_api.query(query=self.build_query(board, key_range), org=self._org)

        records: dict[str, Any] = {}
        for table in tables:
            for record in table.records:
                ts = record.get_time()
                if ts is None:
                    continue
                values: dict[str, Any] = record.values
                records[to_key(ts)] = {v: values.get(v) for v in VARIABLES if values.get(v) is not None}
        return records

    def _query_boards(self) -> list[str]:
        query = f"""
import "influxdata/influxdb/schema"

schema.tagValues(
  bucket: {flux_str(self._bucket)},
  tag: {flux_str(self._board_tag)},
  predicate: (r) => r["_measurement"] == {flux_str(self._measurement)},
  start: 0,
)
"""
        query_api = self._client.query_api()
        tables = query_api.query(query=query, org=self._org)
        return [
            str(record.get_value())
            for table in tables
            for record in table.records
            if record.get_value()
        ]
