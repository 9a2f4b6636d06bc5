"""
Profile updates and per-user booking statistics.
"""

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from app.models.booking import Booking
from app.models.user import User
from app.schemas.user import ProfileUpdate
from app.services.booking_rules import start_of_today, ensure_utc
from app.core.logging import get_logger

logger = get_logger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "phone", "date_of_birth", "gender", "address")


async def update_profile(db: AsyncSession, user: User, update_data: ProfileUpdate) -> User:
    """
    Apply the provided profile fields. Address keys are merged into the
    stored address rather than replacing it.
    """
    changes = update_data.model_dump(exclude_unset=True, exclude_none=True, include=set(PROFILE_FIELDS))
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid fields provided for update",
        )

    if "address" in changes:
        changes["address"] = {**(user.address or {}), **changes["address"]}

    for field, value in changes.items():
        setattr(user, field, value)

    await db.flush()
    await db.refresh(user)

    logger.info("profile_updated", user_id=user.id, fields=sorted(changes))
    return user


async def get_user_stats(db: AsyncSession, user_id: int) -> dict:
    """Booking counts split on the same day boundary as booking_status."""
    today = start_of_today()
    owned = Booking.user_id == user_id

    total = (await db.execute(select(func.count(Booking.id)).where(owned))).scalar_one()
    upcoming = (
        await db.execute(
            select(func.count(Booking.id)).where(owned, Booking.last_travel_date >= today)
        )
    ).scalar_one()
    spent = (
        await db.execute(select(func.coalesce(func.sum(Booking.total_amount), 0)).where(owned))
    ).scalar_one()

    recent = (
        await db.execute(
            select(Booking.booking_reference, Booking.destination, Booking.created_at)
            .where(owned)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .limit(1)
        )
    ).first()

    return {
        "total_bookings": total,
        "upcoming_bookings": upcoming,
        "completed_bookings": total - upcoming,
        "total_spent": float(spent),
        "recent_booking": (
            {
                "booking_reference": recent.booking_reference,
                "destination": recent.destination,
                "created_at": ensure_utc(recent.created_at),
            }
            if recent
            else None
        ),
    }
