from __future__ import annotations

import asyncio

from airboard.core.config import Settings
from airboard.core.logging import get_logger
from airboard.repositories.base import HistoryStore
from airboard.services.admin import AdminService, AuthState, MemoryPinAuthority, PinAuthority
from airboard.services.boards import BoardFeed, BoardRegistry, PollingBoardFeed
from airboard.services.channels import ChannelController
from airboard.services.charts import ChartSink, MemoryChartSink
from airboard.services.executor import ModeExecutor
from airboard.services.scheduler import RefreshScheduler
from airboard.services.selection import BoardSelection

logger = get_logger(__name__)


class Dashboard:
    """Wires the engine for one dashboard view and owns its background tasks."""

    def __init__(
        self,
        *,
        settings: Settings,
        store: HistoryStore,
        sink: ChartSink | None = None,
        feed: BoardFeed | None = None,
        pins: PinAuthority | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.sink = sink if sink is not None else MemoryChartSink()
        self.selection = BoardSelection(path_template=settings.history_path_template)
        self.executor = ModeExecutor(store=store, window=settings.realtime_window)
        self.controller = ChannelController(
            executor=self.executor,
            sink=self.sink,
            selection=self.selection,
            root_timeout_seconds=settings.root_wait_timeout_seconds,
            policy=settings.stale_response_policy,
        )
        self.scheduler = RefreshScheduler(
            controller=self.controller,
            executor=self.executor,
            selection=self.selection,
            interval_seconds=settings.refresh_interval_seconds,
            root_timeout_seconds=settings.root_wait_timeout_seconds,
            enabled=settings.refresh_enabled,
        )
        self.controller.attach_scheduler(self.scheduler)
        if feed is None:
            feed = PollingBoardFeed(
                store=store,
                interval_seconds=settings.boards_poll_interval_seconds,
                timeout_seconds=settings.store_wait_timeout_seconds,
            )
        self.registry = BoardRegistry(
            store=store,
            selection=self.selection,
            controller=self.controller,
            scheduler=self.scheduler,
            feed=feed,
        )
        self.pins = pins if pins is not None else MemoryPinAuthority(
            ttl_seconds=settings.admin_pin_ttl_seconds
        )
        self._feed_task: asyncio.Task[None] | None = None

    def admin(self, auth: AuthState) -> AdminService:
        return AdminService(
            auth=auth, pins=self.pins, provisioner=self.registry, registry=self.registry
        )

    async def start(self) -> None:
        self._feed_task = asyncio.create_task(self.registry.run(), name="airboard-board-feed")
        self.scheduler.start()
        logger.info(
            "dashboard.started",
            backend=self.settings.store_backend,
            refresh=self.settings.refresh_enabled,
        )

    async def stop(self) -> None:
        await self.scheduler.aclose()
        if self._feed_task is not None:
            self._feed_task.cancel()
            try:
                await self._feed_task
            except asyncio.CancelledError:
                pass
            self._feed_task = None
        await self.store.close()
        logger.info("dashboard.stopped")
