"""
JWT issue/verify and password hashing.

Auth is optional on chat: a missing or invalid token makes the request
anonymous. Routes that own user data require a valid token.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from .config import get_settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass
class AuthenticatedUser:
    user_id: str
    email: str = ""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user_id: str, email: str) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(days=settings.jwt_expire_days)
    payload = {"sub": user_id, "email": email, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> AuthenticatedUser:
    """Decode a token. Raises JWTError if invalid or expired."""
    settings = get_settings()
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Token missing sub claim")
    return AuthenticatedUser(user_id=user_id, email=payload.get("email", ""))


async def get_current_user(authorization: str = "") -> Optional[AuthenticatedUser]:
    """
    Resolve the current user from the Authorization header.
    Returns None for anonymous requests, including malformed or expired tokens.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None

    try:
        return verify_token(token)
    except JWTError as e:
        logger.debug("Ignoring invalid token: %s", e)
        return None
