"""
Pydantic schemas for booking responses.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from app.schemas.traveller import TravellerResponse


class Place(BaseModel):
    city: str
    country: str


class FlightEndpoint(BaseModel):
    airport: str
    city: str
    date: datetime
    time: str


class FlightDetails(BaseModel):
    airline: str
    flight_number: str
    departure: FlightEndpoint
    arrival: FlightEndpoint
    cabin_class: Literal["economy", "premium-economy", "business", "first"] = "economy"


class HotelDetails(BaseModel):
    name: str
    address: str
    city: str
    check_in: datetime
    check_out: datetime
    room_type: str
    number_of_rooms: int = Field(..., ge=1)


class BookingResponse(BaseModel):
    id: int
    booking_reference: str
    user_id: int
    origin: Place
    destination: Place
    start_date: datetime
    end_date: datetime
    last_travel_date: datetime
    booking_type: str
    status: str
    travellers: list[TravellerResponse]
    flight_details: Optional[FlightDetails] = None
    hotel_details: Optional[HotelDetails] = None
    total_amount: float
    currency: str
    payment_status: str
    payment_method: str
    special_requests: Optional[str] = None
    booking_source: str
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Derived on read
    booking_status: Literal["upcoming", "completed"]
    duration_days: int


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_bookings: int
    has_next_page: bool
    has_prev_page: bool


class BookingListResponse(BaseModel):
    message: str
    bookings: list[BookingResponse]
    pagination: Pagination


class BookingSummaryResponse(BaseModel):
    message: str = "Booking summary generated successfully"
    booking_id: int
    booking_reference: str
    summary: str
    generated_at: datetime
    note: Optional[str] = None
