from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Protocol

from airboard.core.logging import get_logger
from airboard.repositories.base import HistoryStore
from airboard.services.channels import ChannelController
from airboard.services.scheduler import RefreshScheduler
from airboard.services.selection import BoardSelection

logger = get_logger(__name__)


class BoardFeed(Protocol):
    def __aiter__(self) -> AsyncIterator[list[str]]: ...


class PollingBoardFeed:
    """Live device list: polls the store's board list and yields whenever it changes.

    A failed or timed-out read yields an empty list so the registry can fall
    back to discovering boards from the history itself.
    """

    def __init__(
        self,
        *,
        store: HistoryStore,
        interval_seconds: float,
        timeout_seconds: float,
    ) -> None:
        self._store = store
        self._interval_seconds = interval_seconds
        self._timeout_seconds = timeout_seconds

    async def __aiter__(self) -> AsyncIterator[list[str]]:
        last: list[str] | None = None
        while True:
            try:
                boards = await asyncio.wait_for(
                    self._store.list_boards(), timeout=self._timeout_seconds
                )
            except asyncio.TimeoutError:
                logger.warning("boards.store_unavailable", timeout=self._timeout_seconds)
                boards = None
            current = boards or []
            if current != last:
                last = current
                yield current
            await asyncio.sleep(self._interval_seconds)


class BoardRegistry:
    def __init__(
        self,
        *,
        store: HistoryStore,
        selection: BoardSelection,
        controller: ChannelController,
        scheduler: RefreshScheduler,
        feed: BoardFeed | None = None,
    ) -> None:
        self._store = store
        self._selection = selection
        self._controller = controller
        self._scheduler = scheduler
        self._feed = feed
        self._boards: list[str] = []
        self._degraded = False

    @property
    def boards(self) -> list[str]:
        return list(self._boards)

    @property
    def active(self) -> str | None:
        return self._selection.board

    @property
    def degraded(self) -> bool:
        return self._degraded

    async def run(self) -> None:
        if self._feed is None:
            await self.discover()
            return
        try:
            async for boards in self._feed:
                await self.on_boards(boards)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("boards.feed_failed")
            await self.discover()

    async def on_boards(self, boards: list[str]) -> None:
        if not boards:
            await self.discover()
            return
        self._degraded = False
        await self._publish(boards)

    async def discover(self) -> None:
        """Degraded path: treat every top-level key of the history as a board."""
        keys = await self._store.list_history_keys()
        self._degraded = True
        logger.info("boards.discovered_from_history", boards=keys)
        await self._publish(keys)

    async def register(self, board_id: str) -> None:
        """Make a newly provisioned board selectable before the feed reports it."""
        if board_id not in self._boards:
            self._boards.append(board_id)
            logger.info("boards.registered", board=board_id)

    async def select(self, board_id: str) -> str:
        root = self._selection.set(board_id)
        logger.info("boards.selected", board=board_id, root=root)
        await self._controller.reset_all()
        self._scheduler.start(force=True)
        return root

    async def _publish(self, boards: list[str]) -> None:
        self._boards = list(boards)
        if self._boards and self._selection.board is None:
            await self.select(self._boards[0])
