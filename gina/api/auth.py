"""
Auth API.

POST /auth/register - Create account, returns {user, token}
POST /auth/login    - Exchange credentials for {user, token}
GET  /auth/me       - Current user
PUT  /auth/username - Change display name
PUT  /auth/password - Change password
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser, create_access_token, hash_password, verify_password
from ..core.dependencies import get_db, require_user
from ..models.user import User

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["auth"])

MIN_USERNAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6


class Credentials(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UsernameUpdate(BaseModel):
    username: Optional[str] = None


class PasswordUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: Optional[str] = Field(default=None, alias="currentPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")


async def _user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def _user_by_id(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


@auth_router.post("/register")
async def register(body: Credentials, db: AsyncSession = Depends(get_db)):
    if not body.email or not body.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    email = body.email.strip().lower()
    if await _user_by_email(db, email):
        raise HTTPException(status_code=409, detail="Email already in use")

    user = User(email=email, password_hash=hash_password(body.password))
    db.add(user)
    await db.flush()
    logger.info("Registered user %s", user.id)

    return {"user": user.to_public(), "token": create_access_token(user.id, user.email)}


@auth_router.post("/login")
async def login(body: Credentials, db: AsyncSession = Depends(get_db)):
    user = await _user_by_email(db, (body.email or "").strip().lower())
    if not user or not verify_password(body.password or "", user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return {"user": user.to_public(), "token": create_access_token(user.id, user.email)}


@auth_router.get("/me")
async def me(
    current: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    user = await _user_by_id(db, current.user_id)
    return {"user": user.to_public()}


@auth_router.put("/username")
async def update_username(
    body: UsernameUpdate,
    current: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    username = (body.username or "").strip()
    if len(username) < MIN_USERNAME_LENGTH:
        raise HTTPException(status_code=400, detail="Username must be at least 2 characters")

    user = await _user_by_id(db, current.user_id)
    user.username = username
    await db.flush()
    return {"user": user.to_public()}


@auth_router.put("/password")
async def update_password(
    body: PasswordUpdate,
    current: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    if not body.new_password or len(body.new_password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="New password must be at least 6 characters")

    user = await _user_by_id(db, current.user_id)
    if not verify_password(body.current_password or "", user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")

    user.password_hash = hash_password(body.new_password)
    await db.flush()
    return {"success": True}
