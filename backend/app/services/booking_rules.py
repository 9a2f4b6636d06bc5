"""
Derived booking fields and the UTC day boundary they depend on.

`booking_status` and `duration_days` are computed on every read and never
stored. Every "today" comparison in the service layer goes through
start_of_today(), so listing filters and per-booking status agree.
"""

import math
from datetime import datetime, time, timezone
from typing import Optional

SECONDS_PER_DAY = 24 * 60 * 60


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive values (SQLite drops tzinfo) and convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_today(now: Optional[datetime] = None) -> datetime:
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    return datetime.combine(now.date(), time.min, tzinfo=timezone.utc)


def booking_status(last_travel_date: datetime, today: Optional[datetime] = None) -> str:
    """'upcoming' when the last travel day is today or later."""
    today = today or start_of_today()
    return "upcoming" if ensure_utc(last_travel_date) >= today else "completed"


def duration_days(start_date: datetime, end_date: datetime) -> int:
    delta = ensure_utc(end_date) - ensure_utc(start_date)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def with_derived_fields(booking, today: Optional[datetime] = None) -> dict:
    """Column values of a Booking row plus booking_status and duration_days."""
    data = {column.name: getattr(booking, column.name) for column in booking.__table__.columns}
    for field in ("start_date", "end_date", "last_travel_date", "created_at", "updated_at"):
        if data.get(field) is not None:
            data[field] = ensure_utc(data[field])

    data["booking_status"] = booking_status(booking.last_travel_date, today)
    data["duration_days"] = duration_days(booking.start_date, booking.end_date)
    return data
