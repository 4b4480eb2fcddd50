from __future__ import annotations

from pydantic import BaseModel, Field

BOARD_ID_PATTERN = r"^[\w-]{1,64}$"


class BoardList(BaseModel):
    boards: list[str] = Field(default_factory=list)
    active: str | None = None
    root: str | None = None
    degraded: bool = False


class VisibilityUpdate(BaseModel):
    visible: bool


class VisibilityState(BaseModel):
    visible: bool
    refreshing: bool


class PinIssued(BaseModel):
    status: str = "sent"
    expires_in: int = Field(ge=0)


class BoardRegistration(BaseModel):
    board_id: str = Field(max_length=64)
    pin: str = Field(max_length=6)
