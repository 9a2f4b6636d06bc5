from app.schemas.user import UserCreate, UserResponse, UserLogin, Token, AuthResponse
from app.schemas.booking import BookingResponse, BookingListResponse, BookingSummaryResponse
from app.schemas.traveller import (
    TravellerCreate, TravellerUpdate, TravellerDeleteRequest,
    TravellerResponse, TravellerListResponse,
)

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "Token", "AuthResponse",
    "BookingResponse", "BookingListResponse", "BookingSummaryResponse",
    "TravellerCreate", "TravellerUpdate", "TravellerDeleteRequest",
    "TravellerResponse", "TravellerListResponse",
]
