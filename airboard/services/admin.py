from __future__ import annotations

import re
import secrets
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Protocol

from airboard.core.errors import NotAuthenticated
from airboard.core.logging import get_logger
from airboard.services.boards import BoardRegistry

logger = get_logger(__name__)

BOARD_ID_PATTERN = re.compile(r"^[\w-]+$")
PIN_PATTERN = re.compile(r"^\d{6}$")


@dataclass(frozen=True)
class AdminUser:
    uid: str
    email: str | None = None


class AuthState(Protocol):
    def current_user(self) -> AdminUser | None: ...

    async def settled(self) -> None: ...


class PinAuthority(Protocol):
    """Issues and checks the one-time PIN that gates board registration."""

    async def issue(self, user: AdminUser) -> None: ...

    async def validate(self, user: AdminUser, pin: str) -> str | None:
        """Return None when the PIN is accepted, otherwise the reason it is not."""
        ...


class BoardProvisioner(Protocol):
    async def register(self, board_id: str) -> None: ...


class PinRejected(ValueError):
    pass


PIN_TTL_SECONDS = 5 * 60

PinDelivery = Callable[[AdminUser, str], Awaitable[None]]


@dataclass(frozen=True)
class _IssuedPin:
    code: str
    expires_at: float
    used: bool = False


async def log_pin_delivery(user: AdminUser, code: str) -> None:
    # Email delivery is not wired; the operator reads the PIN from the service log.
    logger.warning("admin.pin_issued", uid=user.uid, email=user.email, pin=code)


class MemoryPinAuthority:
    """Single-use six digit PINs, one live PIN per user, valid for a few minutes."""

    def __init__(
        self,
        *,
        ttl_seconds: float = PIN_TTL_SECONDS,
        deliver: PinDelivery = log_pin_delivery,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._deliver = deliver
        self._clock = clock
        self._pins: dict[str, _IssuedPin] = {}

    async def issue(self, user: AdminUser) -> None:
        code = f"{secrets.randbelow(900_000) + 100_000}"
        self._pins[user.uid] = _IssuedPin(code=code, expires_at=self._clock() + self._ttl_seconds)
        await self._deliver(user, code)

    async def validate(self, user: AdminUser, pin: str) -> str | None:
        issued = self._pins.get(user.uid)
        if issued is None:
            return "Request a PIN first"
        if issued.used:
            return "PIN already used"
        if self._clock() > issued.expires_at:
            return "PIN expired"
        if not secrets.compare_digest(pin, issued.code):
            return "Incorrect PIN"
        self._pins[user.uid] = replace(issued, used=True)
        return None


class AdminService:
    def __init__(
        self,
        *,
        auth: AuthState,
        pins: PinAuthority,
        provisioner: BoardProvisioner,
        registry: BoardRegistry,
    ) -> None:
        self._auth = auth
        self._pins = pins
        self._provisioner = provisioner
        self._registry = registry

    async def require_user(self) -> AdminUser:
        await self._auth.settled()
        user = self._auth.current_user()
        if user is None:
            raise NotAuthenticated()
        return user

    async def request_pin(self) -> None:
        user = await self.require_user()
        await self._pins.issue(user)
        logger.info("admin.pin_requested", uid=user.uid)

    async def add_board(self, board_id: str, pin: str) -> str:
        board_id = board_id.strip()
        if not board_id:
            raise ValueError("Enter a board id")
        if not BOARD_ID_PATTERN.match(board_id):
            raise ValueError("Invalid board id")
        if not PIN_PATTERN.match(pin):
            raise ValueError("Invalid PIN")

        user = await self.require_user()
        reason = await self._pins.validate(user, pin)
        if reason is not None:
            raise PinRejected(reason)

        await self._provisioner.register(board_id)
        logger.info("admin.board_added", uid=user.uid, board=board_id)
        return await self._registry.select(board_id)
