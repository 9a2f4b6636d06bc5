"""
Booking read endpoints and AI booking summaries.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_text_generator
from app.db.session import get_db
from app.infrastructure.text_client import TextGenerator
from app.schemas.booking import BookingResponse, BookingListResponse, BookingSummaryResponse
from app.services.booking_service import get_booking, get_owned_booking, list_bookings
from app.services.summary_service import generate_booking_summary
from app.core.config import get_settings
from app.core.security import get_current_user_id

settings = get_settings()
router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.get("/", response_model=BookingListResponse)
async def list_user_bookings(
    status: Optional[Literal["upcoming", "completed"]] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    List the authenticated user's bookings.

    `upcoming` returns trips whose last travel day is today or later, soonest
    first; `completed` returns the rest, most recent first. Without a status
    every booking is returned, most recent first.
    """
    bookings, pagination = await list_bookings(db, user_id, status, page, limit)
    label = status.capitalize() if status else "All"
    return BookingListResponse(
        message=f"{label} bookings retrieved successfully",
        bookings=bookings,
        pagination=pagination,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_user_booking(
    booking_id: int = Path(..., gt=0),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await get_booking(db, booking_id, user_id)


@router.post("/{booking_id}/summary", response_model=BookingSummaryResponse)
async def summarize_booking(
    booking_id: int = Path(..., gt=0),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    generator: Optional[TextGenerator] = Depends(get_text_generator),
):
    """
    Generate a short description of the booking.

    Always succeeds for an owned booking: if text generation is unavailable
    a summary built from the booking fields is returned with a `note`.
    """
    booking = await get_owned_booking(db, booking_id, user_id)
    return await generate_booking_summary(booking, generator)
