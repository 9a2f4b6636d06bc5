"""
Authentication service: signup, login, token rotation and logout.

Every successful signup/login/refresh issues a new access + refresh pair and
stores the refresh token on the user row; only that stored token is accepted
by refresh and logout.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.schemas.user import UserCreate, UserLogin, Token
from app.core.config import get_settings
from app.core.exceptions import ConflictError, UnauthorizedError
from app.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    get_user_for_refresh_token,
)
from app.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


async def _issue_tokens(db: AsyncSession, user: User) -> Token:
    claims = {"sub": str(user.id), "email": user.email}
    token = Token(
        access_token=create_access_token(claims),
        refresh_token=create_refresh_token(claims),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    user.refresh_token = token.refresh_token
    await db.flush()
    return token


async def register_user(db: AsyncSession, user_data: UserCreate) -> tuple[User, Token]:
    """
    Register a new user with hashed password and log them in.
    Raises 409 if the email already exists.
    """
    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        raise ConflictError("User with this email already exists")

    user = User(
        email=user_data.email,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        phone=user_data.phone,
        date_of_birth=user_data.date_of_birth,
        gender=user_data.gender,
        address=user_data.address.model_dump(),
        hashed_password=hash_password(user_data.password),
    )
    db.add(user)
    await db.flush()

    token = await _issue_tokens(db, user)
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, email=user.email)
    return user, token


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> tuple[User, Token]:
    """
    Authenticate user and return a fresh token pair.
    Raises 401 if credentials are invalid or the account is deactivated.
    """
    result = await db.execute(select(User).where(User.email == login_data.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise UnauthorizedError("Invalid email or password")

    if not user.is_active:
        logger.warning("login_failed", reason="inactive", user_id=user.id)
        raise UnauthorizedError("Account is deactivated. Please contact support.")

    token = await _issue_tokens(db, user)
    logger.info("user_logged_in", user_id=user.id)
    return user, token


async def refresh_tokens(db: AsyncSession, refresh_token: str) -> Token:
    """Rotate both tokens; the presented refresh token stops working."""
    user = await get_user_for_refresh_token(db, refresh_token)
    token = await _issue_tokens(db, user)
    logger.info("tokens_refreshed", user_id=user.id)
    return token


async def logout_user(db: AsyncSession, refresh_token: str) -> None:
    user = await get_user_for_refresh_token(db, refresh_token)
    user.refresh_token = None
    await db.flush()
    logger.info("user_logged_out", user_id=user.id)
