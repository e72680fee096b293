"""Request-scoped dependencies shared by the API routers."""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Callable, Iterator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from datastore.database import build_default_session_factory
from models.records import UserRole
from services.auth import AuthContext, TokenService
from services.day_system import resolve_zone
from services.errors import AuthenticationError
from settings import Settings, get_settings


def get_session() -> Iterator[Session]:
    session = build_default_session_factory()()
    try:
        yield session
    finally:
        session.close()


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(settings)


def get_zone(settings: Settings = Depends(get_settings)) -> tzinfo:
    return resolve_zone(settings.timezone)


def get_now() -> datetime:
    return datetime.now(timezone.utc)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
) -> AuthContext:
    token = _bearer_token(request)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return tokens.decode(token)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def require_roles(*roles: UserRole) -> Callable[..., AuthContext]:
    """Dependency factory that lets only ``roles`` (and admins) through."""

    def _dependency(user: AuthContext = Depends(get_current_user)) -> AuthContext:
        user.require_role(roles)
        return user

    return _dependency
