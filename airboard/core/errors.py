from __future__ import annotations


class AirboardError(Exception):
    """Base class for failures of a single dashboard operation."""

    kind = "error"
    default_message = "Dashboard operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NoBoardSelected(AirboardError):
    kind = "no_board_selected"
    default_message = "Select a board first"


class NoData(AirboardError):
    kind = "no_data"
    default_message = "No data"


class TransportFailure(AirboardError):
    """The store could not be reached or returned an unreadable payload.

    Rendered like NoData by the presentation layer, kept apart inside the engine.
    """

    kind = "transport_failure"
    default_message = "History store unavailable"


class NotAuthenticated(AirboardError):
    kind = "not_authenticated"
    default_message = "Not authenticated"
