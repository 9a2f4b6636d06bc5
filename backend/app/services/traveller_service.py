"""
Traveller service: persists traveller changes on the booking aggregate.

CONCURRENCY STRATEGY: Optimistic Locking with Retry
====================================================

Problem:
  Travellers live inside the booking row as one JSON array. Two requests
  editing the same booking both read the array, both change their copy,
  and the second write silently drops the first one's change. Worse, each
  request checked the duplicate-key and min-one-traveller invariants
  against a list that no longer exists.

Solution:
  Every booking carries a `version` column.

  1. Read the booking (owner scoped) and note its version
  2. Apply the change to a TravellerRoster copy, which enforces invariants
  3. UPDATE bookings SET travellers = :new, version = version + 1
     WHERE id = :id AND user_id = :owner AND version = :seen
  4. If rows_affected == 0, someone else wrote first -> re-read and retry

  Because invariants are re-checked on every attempt against the freshly
  read list, a persisted array always satisfied them at the version it
  replaced.
"""

from typing import Any, Callable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException

from app.models.booking import Booking
from app.services.booking_service import get_owned_booking
from app.services.traveller_roster import TravellerRoster, build_traveller_directory
from app.core.exceptions import ConflictError, NotFoundError, PreconditionError
from app.core.metrics import booking_version_retries, record_traveller_mutation
from app.core.logging import get_logger

logger = get_logger(__name__)

MAX_RETRY_ATTEMPTS = 3


def _outcome(exc: HTTPException) -> str:
    if isinstance(exc, ConflictError):
        return "conflict"
    if isinstance(exc, NotFoundError):
        return "not_found"
    if isinstance(exc, PreconditionError):
        return "precondition"
    return "error"


async def _mutate_travellers(
    db: AsyncSession,
    user_id: int,
    booking_id: int,
    operation: str,
    change: Callable[[TravellerRoster], Any],
) -> tuple[Booking, TravellerRoster, Any]:
    """Read, change and conditionally persist the traveller list."""
    for attempt in range(1, MAX_RETRY_ATTEMPTS + 1):
        try:
            booking = await get_owned_booking(db, booking_id, user_id, refresh=True)
            roster = TravellerRoster(booking.travellers)
            outcome = change(roster)
        except HTTPException as exc:
            record_traveller_mutation(operation, _outcome(exc))
            logger.info(
                "traveller_mutation_rejected",
                operation=operation,
                booking_id=booking_id,
                user_id=user_id,
                reason=exc.detail,
            )
            raise

        seen_version = booking.version
        update_result = await db.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.user_id == user_id,
                Booking.version == seen_version,
            )
            .values(travellers=roster.to_list(), version=Booking.version + 1)
            .execution_options(synchronize_session=False)
        )

        if update_result.rowcount == 0:
            booking_version_retries.inc()
            logger.info(
                "traveller_mutation_retry",
                operation=operation,
                booking_id=booking_id,
                attempt=attempt,
                reason="version_conflict",
            )
            continue

        await db.refresh(booking)
        record_traveller_mutation(operation, "success")
        return booking, roster, outcome

    record_traveller_mutation(operation, "conflict")
    raise ConflictError("Booking was modified concurrently. Please try again.")


async def add_traveller(db: AsyncSession, user_id: int, booking_id: int, data: dict) -> tuple[dict, str]:
    """Append a traveller. Returns (traveller, booking_reference)."""
    booking, _, traveller = await _mutate_travellers(
        db, user_id, booking_id, "add", lambda roster: roster.add(data)
    )
    logger.info(
        "traveller_added",
        booking_id=booking.id,
        traveller_id=traveller["id"],
        travellers=len(booking.travellers),
    )
    return traveller, booking.booking_reference


async def update_traveller(
    db: AsyncSession,
    user_id: int,
    booking_id: int,
    traveller_id: str,
    data: dict,
) -> tuple[dict, str]:
    booking, _, traveller = await _mutate_travellers(
        db, user_id, booking_id, "update", lambda roster: roster.update(traveller_id, data)
    )
    logger.info("traveller_updated", booking_id=booking.id, traveller_id=traveller_id)
    return traveller, booking.booking_reference


async def delete_traveller(
    db: AsyncSession,
    user_id: int,
    booking_id: int,
    traveller_id: str,
) -> tuple[dict, str, int]:
    """Remove a traveller. Returns (removed traveller, booking_reference, remaining count)."""
    booking, roster, removed = await _mutate_travellers(
        db, user_id, booking_id, "delete", lambda roster: roster.remove(traveller_id)
    )
    logger.info(
        "traveller_deleted",
        booking_id=booking.id,
        traveller_id=traveller_id,
        remaining=len(roster),
    )
    return removed, booking.booking_reference, len(roster)


async def list_travellers(db: AsyncSession, user_id: int) -> list[dict]:
    """Every distinct traveller across the user's bookings, oldest booking first."""
    result = await db.execute(
        select(Booking.booking_reference, Booking.travellers)
        .where(Booking.user_id == user_id)
        .order_by(Booking.id.asc())
    )
    directory = build_traveller_directory(
        (row.booking_reference, row.travellers or []) for row in result
    )
    logger.info("travellers_listed", user_id=user_id, total=len(directory))
    return directory
