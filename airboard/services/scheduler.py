from __future__ import annotations

import asyncio

from airboard.core.errors import TransportFailure
from airboard.core.logging import board_context, get_logger
from airboard.services.channels import ChannelController
from airboard.services.executor import ModeExecutor
from airboard.services.selection import BoardSelection

logger = get_logger(__name__)


class RefreshScheduler:
    """Periodic realtime re-render while the dashboard view is visible.

    Each tick reads the board history once and hands it to every channel that
    is still in realtime mode. Channels in a manual mode are left alone.
    """

    def __init__(
        self,
        *,
        controller: ChannelController,
        executor: ModeExecutor,
        selection: BoardSelection,
        interval_seconds: float,
        root_timeout_seconds: float,
        enabled: bool = True,
    ) -> None:
        self._controller = controller
        self._executor = executor
        self._selection = selection
        self._interval_seconds = interval_seconds
        self._root_timeout_seconds = root_timeout_seconds
        self._enabled = enabled
        self._visible = True
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def visible(self) -> bool:
        return self._visible

    def start(self, *, force: bool = False) -> bool:
        if not self._enabled or not self._visible:
            return False
        if self.running and not force:
            return False
        self.stop()
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="airboard-realtime-refresh"
        )
        return True

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def aclose(self) -> None:
        task = self._task
        self.stop()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def set_visible(self, visible: bool) -> None:
        self._visible = visible
        if visible:
            self.start(force=True)
        else:
            self.stop()
        logger.info("scheduler.visibility_changed", visible=visible, running=self.running)

    async def tick(self) -> int:
        """Run one refresh pass; returns the number of channels re-rendered."""
        root = await self._selection.wait_root(self._root_timeout_seconds)
        if root is None:
            logger.debug("scheduler.no_board")
            return 0

        live = self._controller.realtime_channels()
        if not live:
            return 0

        with board_context(root):
            try:
                samples = await self._executor.load(root)
            except TransportFailure as e:
                logger.warning("scheduler.fetch_failed", detail=str(e))
                return 0
            if not samples:
                return 0

            updated = [v for v in live if self._controller.apply_realtime(v, samples)]
            logger.debug("scheduler.tick", channels=updated, samples=len(samples))
            return len(updated)

    async def _run(self) -> None:
        while True:
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("scheduler.tick_failed")
            await asyncio.sleep(self._interval_seconds)
