from __future__ import annotations

import asyncio


class BoardSelection:
    """The active board and its history root, shared by every component."""

    def __init__(self, *, path_template: str) -> None:
        self._path_template = path_template
        self._board: str | None = None
        self._root: str | None = None
        self._ready = asyncio.Event()

    @property
    def board(self) -> str | None:
        return self._board

    @property
    def root(self) -> str | None:
        return self._root

    def root_for(self, board_id: str) -> str:
        return self._path_template.format(board=board_id)

    def set(self, board_id: str) -> str:
        self._board = board_id
        self._root = self.root_for(board_id)
        self._ready.set()
        return self._root

    async def wait_root(self, timeout_seconds: float) -> str | None:
        if self._root is not None:
            return self._root
        try:
            await asyncio.wait_for(self._ready.wait(), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            return None
        return self._root
