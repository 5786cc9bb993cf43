"""Common API dependencies."""

from __future__ import annotations

import uuid
from typing import Annotated
from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordBearer
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.core.config import get_settings
from booking_engine.core.security import decode_access_token
from booking_engine.db.session import get_session
from booking_engine.models.user import User, UserStatus
from booking_engine.services.errors import (
    AuthorizationError,
    BookingEngineError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    NotSchedulableError,
)

settings = get_settings()

# Identity comes from the surrounding marketplace; no token endpoint is served here.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_v1_prefix}/auth/token")

_ERROR_STATUS: dict[type[BookingEngineError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    NotSchedulableError: status.HTTP_422_UNPROCESSABLE_CONTENT,
    InvalidRequestError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    BookingEngineError: status.HTTP_400_BAD_REQUEST,
}


def to_http_error(exc: BookingEngineError) -> HTTPException:
    """Translate a service-layer error into the matching HTTP response."""
    status_code = next(
        _ERROR_STATUS[error_type]
        for error_type in type(exc).__mro__
        if error_type in _ERROR_STATUS
    )
    return HTTPException(status_code=status_code, detail=str(exc))


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> User:
    """Authenticate request via bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        raise credentials_exception from exc

    subject = payload.get("sub")
    if subject is None:
        raise credentials_exception

    try:
        user_id = uuid.UUID(subject)
    except (ValueError, TypeError) as exc:
        raise credentials_exception from exc

    user = await session.get(User, user_id)
    if user is None or user.status != UserStatus.ACTIVE:
        raise credentials_exception
    return user


def _parse_rate(value: str, *, fallback: tuple[int, int]) -> tuple[int, int]:
    try:
        count_str, window_str = value.split("/", 1)
        count = int(count_str.strip())
    except ValueError:
        return fallback
    window = window_str.strip().lower()
    seconds_map = {
        "second": 1,
        "seconds": 1,
        "minute": 60,
        "minutes": 60,
        "hour": 3600,
        "hours": 3600,
        "day": 86400,
        "days": 86400,
    }
    seconds = seconds_map.get(window, fallback[1])
    return count, seconds


def rate_limit(value: str, *, fallback: tuple[int, int] = (100, 60)):
    """Dependency enforcing ``value`` (e.g. ``"20/minute"``) once redis is set up."""
    times, seconds = _parse_rate(value, fallback=fallback)

    async def _dependency(request: Request, response: Response) -> None:
        if FastAPILimiter.redis is None:
            return None
        limiter = RateLimiter(times=times, seconds=seconds)
        await limiter(request, response)

    return Depends(_dependency)
