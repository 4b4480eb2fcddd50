from __future__ import annotations

from typing import Any

import httpx

from airboard.clients.rtdb import RtdbClient
from airboard.core.logging import get_logger
from airboard.models.sample import KeyRange, RecordSet
from airboard.repositories.keys import rtdb_str

logger = get_logger(__name__)


class RtdbHistoryStore:
    """History store over the REST JSON database the boards upload to.

    Layout: `<data_root>/<board>/historial/<key>` holds one record per reading,
    `<boards_path>/<board>` lists registered boards.
    """

    def __init__(self, *, client: RtdbClient, data_root: str, boards_path: str) -> None:
        self._client = client
        self._data_root = data_root
        self._boards_path = boards_path

    async def ping(self) -> None:
        await self._client.get_json(self._boards_path, params={"shallow": "true"})

    async def close(self) -> None:
        await self._client.close()

    async def fetch(self, root: str, key_range: KeyRange | None = None) -> RecordSet:
        params: dict[str, str] | None = None
        if key_range is not None:
            params = {
                "orderBy": rtdb_str("$key"),
                "startAt": rtdb_str(key_range.start),
                "endAt": rtdb_str(key_range.end),
            }

        try:
            payload = await self._client.get_json(root, params=params)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("history.fetch_failed", root=root, error=str(e))
            return RecordSet.failed(f"{type(e).__name__}: {e}")

        if payload is None:
            return RecordSet()
        if not isinstance(payload, dict):
            logger.warning(
                "history.unexpected_payload", root=root, payload_type=type(payload).__name__
            )
            return RecordSet.failed("Unexpected history payload shape")
        return RecordSet(records=payload)

    async def list_boards(self) -> list[str] | None:
        try:
            payload = await self._client.get_json(self._boards_path)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("history.boards_failed", path=self._boards_path, error=str(e))
            return None
        return _keys(payload)

    async def list_history_keys(self) -> list[str]:
        try:
            payload = await self._client.get_json(self._data_root, params={"shallow": "true"})
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("history.discovery_failed", path=self._data_root, error=str(e))
            return []
        return _keys(payload)


def _keys(payload: Any) -> list[str]:
    if not isinstance(payload, dict):
        return []
    return [str(k) for k in payload.keys() if k]
