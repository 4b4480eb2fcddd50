from __future__ import annotations

from fastapi import HTTPException, status

from airboard.core.errors import NoBoardSelected, NoData, NotAuthenticated, TransportFailure

# A store outage is shown to users exactly like an empty range.
_STATUS_BY_KIND: dict[str, tuple[int, str]] = {
    NoBoardSelected.kind: (status.HTTP_409_CONFLICT, "Select a board first"),
    NoData.kind: (status.HTTP_404_NOT_FOUND, "No data"),
    TransportFailure.kind: (status.HTTP_404_NOT_FOUND, "No data"),
    NotAuthenticated.kind: (status.HTTP_401_UNAUTHORIZED, "Not authenticated"),
}


def http_error(kind: str) -> HTTPException:
    status_code, detail = _STATUS_BY_KIND.get(
        kind, (status.HTTP_500_INTERNAL_SERVER_ERROR, "Dashboard error")
    )
    return HTTPException(status_code=status_code, detail=detail)
