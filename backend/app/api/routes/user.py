"""
Profile and statistics endpoints for the authenticated user.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.user import User
from app.schemas.user import ProfileUpdate, ProfileResponse, UserStatsResponse
from app.services.user_service import update_profile, get_user_stats
from app.core.security import get_current_user

router = APIRouter(prefix="/user", tags=["User"])


@router.get("/profile", response_model=ProfileResponse)
async def read_profile(user: User = Depends(get_current_user)):
    return ProfileResponse(message="Profile retrieved successfully", user=user)


@router.put("/profile", response_model=ProfileResponse)
async def edit_profile(
    update_data: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Update first/last name, phone, date of birth, gender or address.
    Any other field in the body is ignored.
    """
    user = await update_profile(db, user, update_data)
    return ProfileResponse(message="Profile updated successfully", user=user)


@router.get("/stats", response_model=UserStatsResponse)
async def read_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Booking counts, total spent and the most recent booking."""
    stats = await get_user_stats(db, user.id)
    return UserStatsResponse(stats=stats)
