"""
Pydantic schemas for traveller requests and responses.

Add and update carry the full traveller schema; delete carries only the
target booking id.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from app.schemas.common import BirthDate, Gender, PersonName

TRAVELLER_ID_PATTERN = r"^[0-9a-f]{32}$"


class TravellerData(BaseModel):
    first_name: PersonName
    last_name: PersonName
    date_of_birth: BirthDate
    gender: Gender
    passport_number: Optional[str] = Field(None, max_length=50)
    nationality: str = Field(..., min_length=1, max_length=100)

    model_config = {"str_strip_whitespace": True}


class TravellerCreate(TravellerData):
    booking_id: int = Field(..., gt=0)


class TravellerUpdate(TravellerData):
    booking_id: int = Field(..., gt=0)


class TravellerDeleteRequest(BaseModel):
    booking_id: int = Field(..., gt=0)


class TravellerResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    date_of_birth: date
    gender: str
    passport_number: Optional[str] = None
    nationality: str


class TravellerDirectoryEntry(TravellerResponse):
    booking_references: list[str]


class TravellerListResponse(BaseModel):
    message: str = "Travellers retrieved successfully"
    travellers: list[TravellerDirectoryEntry]
    total_travellers: int


class TravellerMutationResponse(BaseModel):
    message: str
    traveller: TravellerResponse
    booking_reference: str


class DeletedTraveller(BaseModel):
    id: str
    first_name: str
    last_name: str


class TravellerDeleteResponse(BaseModel):
    message: str = "Traveller deleted successfully"
    deleted_traveller: DeletedTraveller
    booking_reference: str
    remaining_travellers: int
