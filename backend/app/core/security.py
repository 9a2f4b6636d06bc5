"""
Password hashing, JWT issuance/verification and the current-user dependency.

Access and refresh tokens are signed with separate secrets and carry a
`type` claim, so one can never be replayed as the other.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import UnauthorizedError
from app.core.logging import get_logger
from app.db.session import get_db
from app.models.user import User

logger = get_logger(__name__)
settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)

# bcrypt only looks at the first 72 bytes and rejects longer input
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def _encode(data: dict, secret: str, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **data,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=settings.ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        data,
        settings.SECRET_KEY,
        "access",
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        data,
        settings.REFRESH_SECRET_KEY,
        "refresh",
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_access_token(token: str) -> dict:
    """Raises UnauthorizedError with a message naming the failure."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Access token has expired")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid access token")

    if payload.get("type") != "access" or "sub" not in payload:
        raise UnauthorizedError("Invalid access token")
    return payload


def decode_refresh_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.REFRESH_SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Refresh token has expired")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid refresh token")

    if payload.get("type") != "refresh" or "sub" not in payload:
        raise UnauthorizedError("Invalid refresh token")
    return payload


def _user_id_from(payload: dict, detail: str) -> int:
    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError(detail)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer access token to an active user."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access token is required")

    payload = decode_access_token(credentials.credentials)
    user = await db.get(User, _user_id_from(payload, "Invalid access token"))

    if user is None:
        raise UnauthorizedError("Invalid token - user not found")
    if not user.is_active:
        raise UnauthorizedError("Account is deactivated")
    return user


async def get_current_user_id(user: User = Depends(get_current_user)) -> int:
    return user.id


async def get_user_for_refresh_token(db: AsyncSession, refresh_token: str) -> User:
    """Resolve a refresh token to its user; the token must be the one on record."""
    payload = decode_refresh_token(refresh_token)
    user = await db.get(User, _user_id_from(payload, "Invalid refresh token"))

    if user is None or user.refresh_token != refresh_token:
        logger.warning("refresh_token_rejected", user_id=payload.get("sub"))
        raise UnauthorizedError("Invalid refresh token")
    if not user.is_active:
        raise UnauthorizedError("Account is deactivated")
    return user
