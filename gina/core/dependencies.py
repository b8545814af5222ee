"""
FastAPI dependencies. Injected into route handlers.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from .auth import AuthenticatedUser, get_current_user
from .database import get_db as _get_db


async def get_db() -> AsyncSession:
    """Yields an async DB session per request."""
    async for session in _get_db():
        yield session


async def get_optional_user(
    authorization: str = Header(default=""),
) -> Optional[AuthenticatedUser]:
    """Resolve the user if a valid bearer token is present, else None."""
    return await get_current_user(authorization)


async def require_user(
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> AuthenticatedUser:
    """Same as get_optional_user, but anonymous requests get 401."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_store(request: Request):
    """The RecordStore built by the app factory."""
    return request.app.state.store


def get_orchestrator(request: Request):
    """The TurnOrchestrator built by the app factory."""
    return request.app.state.orchestrator
