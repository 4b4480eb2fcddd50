from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from airboard.api.deps import ReadUser, authenticate_user, get_settings
from airboard.core.config import Settings
from airboard.core.logging import get_logger
from airboard.core.security import create_access_token, granted_scopes
from airboard.schemas.auth import Token, User

logger = get_logger(__name__)

router = APIRouter(prefix="/auth")

NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


@router.post("/token", response_model=Token)
def issue_token(
    response: Response,
    form: Annotated[OAuth2PasswordRequestForm, Depends()],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Token:
    """Password grant. Requested scopes narrow the token; none requested grants all."""
    user = authenticate_user(username=form.username, password=form.password, settings=settings)
    if user is None:
        logger.info("auth.login_rejected", username=form.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    scopes = granted_scopes(form.scopes, user.scopes)
    logger.info("auth.token_issued", username=user.username, scopes=scopes)
    response.headers.update(NO_STORE_HEADERS)
    return Token(
        access_token=create_access_token(subject=user.username, scopes=scopes, settings=settings),
        expires_in=settings.access_token_expire_minutes * 60,
        scope=" ".join(scopes),
    )


@router.get("/me", response_model=User)
def whoami(user: ReadUser) -> User:
    return user
