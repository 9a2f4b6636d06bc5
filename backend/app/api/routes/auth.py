"""
Authentication endpoints: signup, login, token refresh and logout.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.user import (
    UserCreate, UserLogin, AuthResponse, RefreshRequest, TokenResponse, MessageResponse,
)
from app.services.auth_service import register_user, authenticate_user, refresh_tokens, logout_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new user account and receive a token pair."""
    user, tokens = await register_user(db, user_data)
    return AuthResponse(message="User registered successfully", user=user, tokens=tokens)


@router.post("/login", response_model=AuthResponse)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access + refresh token pair."""
    user, tokens = await authenticate_user(db, login_data)
    return AuthResponse(message="Login successful", user=user, tokens=tokens)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(payload: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Exchange the current refresh token for a new pair."""
    tokens = await refresh_tokens(db, payload.refresh_token)
    return TokenResponse(tokens=tokens)


@router.post("/logout", response_model=MessageResponse)
async def logout(payload: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Invalidate the stored refresh token."""
    await logout_user(db, payload.refresh_token)
    return MessageResponse(message="Logged out successfully")
