"""
Pydantic schemas for authentication and profile requests/responses.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.common import PHONE_PATTERN, BirthDate, Gender, PersonName


class Address(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)

    model_config = {"str_strip_whitespace": True}


class AddressUpdate(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None

    model_config = {"str_strip_whitespace": True}


class UserCreate(BaseModel):
    first_name: PersonName
    last_name: PersonName
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    date_of_birth: BirthDate
    gender: Gender
    address: Address

    model_config = {"str_strip_whitespace": True}

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class ProfileUpdate(BaseModel):
    first_name: Optional[PersonName] = None
    last_name: Optional[PersonName] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    date_of_birth: Optional[BirthDate] = None
    gender: Optional[Gender] = None
    address: Optional[AddressUpdate] = None

    model_config = {"str_strip_whitespace": True}


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    phone: str
    date_of_birth: date
    gender: str
    address: Address
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until the access token expires


class AuthResponse(BaseModel):
    message: str
    user: UserResponse
    tokens: Token


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    message: str = "Tokens refreshed successfully"
    tokens: Token


class MessageResponse(BaseModel):
    message: str


class ProfileResponse(BaseModel):
    message: str
    user: UserResponse


class RecentBooking(BaseModel):
    booking_reference: str
    destination: dict
    created_at: datetime


class UserStats(BaseModel):
    total_bookings: int
    upcoming_bookings: int
    completed_bookings: int
    total_spent: float
    recent_booking: Optional[RecentBooking] = None


class UserStatsResponse(BaseModel):
    message: str = "User statistics retrieved successfully"
    stats: UserStats
