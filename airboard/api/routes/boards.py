from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, status

from airboard.api.deps import DashboardDep, ReadUser, WriteUser
from airboard.schemas.boards import BOARD_ID_PATTERN, BoardList
from airboard.services.dashboard import Dashboard

router = APIRouter(prefix="/boards")


def board_list(dashboard: Dashboard) -> BoardList:
    return BoardList(
        boards=dashboard.registry.boards,
        active=dashboard.selection.board,
        root=dashboard.selection.root,
        degraded=dashboard.registry.degraded,
    )


@router.get("", response_model=BoardList)
async def list_boards(_: ReadUser, dashboard: DashboardDep) -> BoardList:
    return board_list(dashboard)


@router.post("/discover", response_model=BoardList)
async def discover_boards(_: WriteUser, dashboard: DashboardDep) -> BoardList:
    await dashboard.registry.discover()
    return board_list(dashboard)


@router.post("/{board_id}/select", response_model=BoardList)
async def select_board(
    _: WriteUser,
    board_id: Annotated[str, Path(pattern=BOARD_ID_PATTERN)],
    dashboard: DashboardDep,
) -> BoardList:
    known = dashboard.registry.boards
    if known and board_id not in known:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown board")
    await dashboard.registry.select(board_id)
    return board_list(dashboard)
