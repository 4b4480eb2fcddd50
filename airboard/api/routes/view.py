from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status

from airboard.api.deps import DashboardDep, ReadUser, WriteUser
from airboard.api.errors import http_error
from airboard.core.errors import AirboardError, NoBoardSelected
from airboard.core.logging import get_logger
from airboard.schemas.boards import VisibilityState, VisibilityUpdate
from airboard.schemas.channels import DAY_PATTERN, ThresholdRead
from airboard.services.export import export_csv, export_filename
from airboard.services.thresholds import legend, status_slot, threshold_for

logger = get_logger(__name__)

router = APIRouter()


@router.post("/view/visibility", response_model=VisibilityState)
async def set_visibility(
    _: ReadUser, payload: VisibilityUpdate, dashboard: DashboardDep
) -> VisibilityState:
    dashboard.scheduler.set_visible(payload.visible)
    return VisibilityState(
        visible=dashboard.scheduler.visible, refreshing=dashboard.scheduler.running
    )


@router.get("/thresholds", response_model=list[ThresholdRead])
async def thresholds(_: ReadUser, dashboard: DashboardDep) -> list[ThresholdRead]:
    rows: list[ThresholdRead] = []
    for variable in dashboard.controller.variables:
        limits = threshold_for(variable)
        rows.append(
            ThresholdRead(
                variable=variable,
                floor=limits.floor,
                normal_ceiling=limits.normal_ceiling,
                warn_ceiling=limits.warn_ceiling,
                status_slot=status_slot(variable),
                legend=legend(variable),
            )
        )
    return rows


@router.get("/export.csv")
async def export(
    _: ReadUser,
    dashboard: DashboardDep,
    start: Annotated[str, Query(pattern=DAY_PATTERN)],
    end: Annotated[str, Query(pattern=DAY_PATTERN)],
) -> Response:
    if start > end:
        raise HTTPException(status_code=400, detail="'start' must be <= 'end'")
    try:
        root = await dashboard.selection.wait_root(dashboard.settings.root_wait_timeout_seconds)
        if root is None:
            raise NoBoardSelected()
        body = await export_csv(dashboard.executor, root, start, end)
    except AirboardError as e:
        logger.info("export.failed", kind=e.kind, start=start, end=end)
        raise http_error(e.kind) from e

    filename = export_filename(dashboard.selection.board, start, end)
    return Response(
        content=body.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/health", tags=["meta"])
async def health(dashboard: DashboardDep) -> dict[str, str]:
    try:
        await dashboard.store.ping()
    except Exception as e:  # noqa: BLE001 - expose as 503 without leaking internals
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="History store unavailable",
        ) from e
    return {"status": "ok"}
