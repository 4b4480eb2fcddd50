from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from airboard.api.deps import AdminDep, DashboardDep
from airboard.api.errors import http_error
from airboard.api.routes.boards import board_list
from airboard.core.errors import AirboardError
from airboard.schemas.boards import BoardList, BoardRegistration, PinIssued
from airboard.services.admin import PinRejected

router = APIRouter(prefix="/admin")


@router.post("/pin", response_model=PinIssued, status_code=status.HTTP_202_ACCEPTED)
async def request_pin(admin: AdminDep, dashboard: DashboardDep) -> PinIssued:
    try:
        await admin.request_pin()
    except AirboardError as e:
        raise http_error(e.kind) from e
    return PinIssued(expires_in=int(dashboard.settings.admin_pin_ttl_seconds))


@router.post("/boards", response_model=BoardList)
async def add_board(
    payload: BoardRegistration, admin: AdminDep, dashboard: DashboardDep
) -> BoardList:
    try:
        await admin.add_board(payload.board_id, payload.pin)
    except AirboardError as e:
        raise http_error(e.kind) from e
    except PinRejected as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return board_list(dashboard)
