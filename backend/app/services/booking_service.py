"""
Booking query service: owner-scoped reads with derived fields.

Listing splits bookings on start_of_today() (UTC):

  upcoming   last_travel_date >= today   soonest first
  completed  last_travel_date <  today   most recent first
  (none)     no date filter              most recent first

Pagination is offset based: skip = (page - 1) * limit. The count query uses
the same filter, so total_pages always matches what paging can reach. Both
queries are served by ix_bookings_user_last_travel_date.
"""

import math
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking
from app.services.booking_rules import start_of_today, with_derived_fields
from app.core.exceptions import NotFoundError
from app.core.metrics import booking_queries
from app.core.logging import get_logger

logger = get_logger(__name__)


async def get_owned_booking(
    db: AsyncSession,
    booking_id: int,
    user_id: int,
    refresh: bool = False,
) -> Booking:
    """
    Fetch a booking scoped to its owner.
    Someone else's booking is reported exactly like a missing one.
    """
    query = select(Booking).where(Booking.id == booking_id, Booking.user_id == user_id)
    if refresh:
        query = query.execution_options(populate_existing=True)

    booking = (await db.execute(query)).scalar_one_or_none()
    if not booking:
        logger.info("booking_not_found", booking_id=booking_id, user_id=user_id)
        raise NotFoundError("Booking not found")
    return booking


async def get_booking(db: AsyncSession, booking_id: int, user_id: int) -> dict:
    booking = await get_owned_booking(db, booking_id, user_id)
    return with_derived_fields(booking)


async def list_bookings(
    db: AsyncSession,
    user_id: int,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[dict], dict]:
    """Return one page of bookings plus pagination metadata."""
    today = start_of_today()
    query = select(Booking).where(Booking.user_id == user_id)

    if status == "upcoming":
        query = query.where(Booking.last_travel_date >= today)
        order = (Booking.last_travel_date.asc(), Booking.id.asc())
    elif status == "completed":
        query = query.where(Booking.last_travel_date < today)
        order = (Booking.last_travel_date.desc(), Booking.id.desc())
    else:
        order = (Booking.last_travel_date.desc(), Booking.id.desc())

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    result = await db.execute(
        query
        .order_by(*order)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    bookings = [with_derived_fields(b, today) for b in result.scalars().all()]

    total_pages = math.ceil(total / limit)
    pagination = {
        "current_page": page,
        "total_pages": total_pages,
        "total_bookings": total,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }

    booking_queries.labels(status=status or "all").inc()
    logger.info(
        "bookings_listed",
        user_id=user_id,
        status=status or "all",
        page=page,
        returned=len(bookings),
        total=total,
    )
    return bookings, pagination
