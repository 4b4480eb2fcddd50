from __future__ import annotations

from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import OAuth2PasswordBearer, SecurityScopes
from pydantic import ValidationError

from airboard.core.config import Settings
from airboard.core.security import DASHBOARD_SCOPES, decode_access_token, verify_password
from airboard.schemas.auth import TokenClaims, User
from airboard.services.admin import AdminService, AdminUser
from airboard.services.dashboard import Dashboard

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", scopes=DASHBOARD_SCOPES)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_dashboard(request: Request) -> Dashboard:
    return request.app.state.dashboard


def authenticate_user(*, username: str, password: str, settings: Settings) -> User | None:
    """The dashboard has a single operator account configured in settings."""
    if username != settings.admin_username:
        return None
    if not verify_password(password, settings.admin_password_hash):
        return None
    return User(username=username, scopes=sorted(DASHBOARD_SCOPES))


def _challenge(security_scopes: SecurityScopes) -> dict[str, str]:
    if security_scopes.scopes:
        return {"WWW-Authenticate": f'Bearer scope="{security_scopes.scope_str}"'}
    return {"WWW-Authenticate": "Bearer"}


def get_current_user(
    security_scopes: SecurityScopes,
    token: Annotated[str, Depends(oauth2_scheme)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    headers = _challenge(security_scopes)
    try:
        claims = TokenClaims.model_validate(decode_access_token(token, settings=settings))
    except (jwt.PyJWTError, ValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers=headers,
        ) from e

    user = User(username=claims.sub, scopes=claims.scopes)
    missing = [scope for scope in security_scopes.scopes if not user.can(scope)]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions",
            headers=headers,
        )
    return user


DashboardDep = Annotated[Dashboard, Depends(get_dashboard)]

ReadUser = Annotated[User, Security(get_current_user, scopes=["dashboard:read"])]
WriteUser = Annotated[User, Security(get_current_user, scopes=["dashboard:write"])]


class OperatorAuth:
    """Board provisioning is reserved for the configured operator account."""

    def __init__(self, user: User, settings: Settings) -> None:
        self._user = user
        self._settings = settings

    def current_user(self) -> AdminUser | None:
        if self._user.username != self._settings.admin_username:
            return None
        return AdminUser(uid=self._user.username)

    async def settled(self) -> None:
        # Bearer tokens are fully resolved before the route runs.
        return None


def get_admin_service(
    user: WriteUser,
    settings: Annotated[Settings, Depends(get_settings)],
    dashboard: DashboardDep,
) -> AdminService:
    return dashboard.admin(OperatorAuth(user, settings))


AdminDep = Annotated[AdminService, Depends(get_admin_service)]
