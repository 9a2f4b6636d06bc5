"""
Traveller endpoints: the user's traveller directory and per-booking
traveller add/update/delete.

The target booking is always named by `booking_id` in the request body and
must belong to the caller; otherwise the response is 404.
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.traveller import (
    TRAVELLER_ID_PATTERN,
    TravellerCreate,
    TravellerUpdate,
    TravellerDeleteRequest,
    TravellerListResponse,
    TravellerMutationResponse,
    TravellerDeleteResponse,
)
from app.services import traveller_service
from app.services.cache_service import invalidate_booking_summaries
from app.core.security import get_current_user_id

router = APIRouter(prefix="/travellers", tags=["Travellers"])

TravellerId = Annotated[str, Path(pattern=TRAVELLER_ID_PATTERN, description="Traveller sub-record id")]


@router.get("/", response_model=TravellerListResponse)
async def list_user_travellers(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Distinct travellers across all of the user's bookings, with booking references."""
    travellers = await traveller_service.list_travellers(db, user_id)
    return TravellerListResponse(travellers=travellers, total_travellers=len(travellers))


@router.post("/", response_model=TravellerMutationResponse, status_code=status.HTTP_201_CREATED)
async def add_traveller(
    payload: TravellerCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Add a traveller to a booking.
    Returns 409 if the same person (name + date of birth) is already on it.
    """
    traveller, reference = await traveller_service.add_traveller(
        db, user_id, payload.booking_id, payload.model_dump(exclude={"booking_id"})
    )
    await invalidate_booking_summaries(payload.booking_id)
    return TravellerMutationResponse(
        message="Traveller added to booking successfully",
        traveller=traveller,
        booking_reference=reference,
    )


@router.put("/{traveller_id}", response_model=TravellerMutationResponse)
async def update_traveller(
    payload: TravellerUpdate,
    traveller_id: TravellerId,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Replace a traveller's details; 409 if they now match another traveller."""
    traveller, reference = await traveller_service.update_traveller(
        db,
        user_id,
        payload.booking_id,
        traveller_id,
        payload.model_dump(exclude={"booking_id"}, exclude_unset=True),
    )
    await invalidate_booking_summaries(payload.booking_id)
    return TravellerMutationResponse(
        message="Traveller updated successfully",
        traveller=traveller,
        booking_reference=reference,
    )


@router.delete("/{traveller_id}", response_model=TravellerDeleteResponse)
async def delete_traveller(
    traveller_id: TravellerId,
    payload: TravellerDeleteRequest = Body(...),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Remove a traveller; a booking's last traveller cannot be removed (400)."""
    removed, reference, remaining = await traveller_service.delete_traveller(
        db, user_id, payload.booking_id, traveller_id
    )
    await invalidate_booking_summaries(payload.booking_id)
    return TravellerDeleteResponse(
        deleted_traveller=removed,
        booking_reference=reference,
        remaining_travellers=remaining,
    )
