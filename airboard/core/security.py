from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

from airboard.core.config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

DASHBOARD_SCOPES = {
    "dashboard:read": "Read channels, boards and exports",
    "dashboard:write": "Change channel modes, select boards",
}


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def granted_scopes(requested: list[str], allowed: Iterable[str]) -> list[str]:
    allowed = set(allowed)
    if not requested:
        return sorted(allowed)
    return sorted(allowed.intersection(requested))


def create_access_token(
    *,
    subject: str,
    scopes: Iterable[str],
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    issued_at = datetime.now(tz=timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    claims: dict[str, Any] = {
        "sub": subject,
        "scopes": list(scopes),
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, *, settings: Settings) -> dict[str, Any]:
    """Raises jwt.PyJWTError for anything that is not a live, signed token."""
    return jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.algorithm],
        options={"require": ["exp", "sub"]},
    )
