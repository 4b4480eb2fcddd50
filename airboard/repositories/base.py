from __future__ import annotations

from typing import Protocol

from airboard.models.sample import KeyRange, RecordSet


class HistoryStore(Protocol):
    async def ping(self) -> None: ...

    async def fetch(self, root: str, key_range: KeyRange | None = None) -> RecordSet: ...

    async def list_boards(self) -> list[str] | None: ...

    async def list_history_keys(self) -> list[str]: ...

    async def close(self) -> None: ...
