"""
Seed the database with sample users and bookings.

    python -m app.db.seed

Wipes existing users and bookings, then creates four users with three
upcoming and two completed bookings each. Every user's own traveller record
repeats across their bookings, so the traveller directory has something to
merge. All sample users share the password "password123".
"""

import asyncio
import uuid
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import delete

from app.core.logging import setup_logging, get_logger
from app.core.security import hash_password
from app.db.base import Base
from app.db.session import AsyncSessionLocal, engine
from app.models.booking import Booking
from app.models.user import User
from app.services.booking_rules import start_of_today

logger = get_logger(__name__)

SAMPLE_PASSWORD = "password123"

SAMPLE_USERS = [
    {
        "first_name": "John", "last_name": "Doe", "email": "john.doe@example.com",
        "phone": "+1-555-0101", "date_of_birth": date(1990, 5, 15), "gender": "male",
        "address": {"street": "123 Main Street", "city": "New York", "state": "NY",
                    "country": "USA", "zip_code": "10001"},
    },
    {
        "first_name": "Jane", "last_name": "Smith", "email": "jane.smith@example.com",
        "phone": "+1-555-0102", "date_of_birth": date(1985, 8, 22), "gender": "female",
        "address": {"street": "456 Oak Avenue", "city": "Los Angeles", "state": "CA",
                    "country": "USA", "zip_code": "90210"},
    },
    {
        "first_name": "Mike", "last_name": "Johnson", "email": "mike.johnson@example.com",
        "phone": "+1-555-0103", "date_of_birth": date(1992, 12, 10), "gender": "male",
        "address": {"street": "789 Pine Road", "city": "Chicago", "state": "IL",
                    "country": "USA", "zip_code": "60601"},
    },
    {
        "first_name": "Sarah", "last_name": "Williams", "email": "sarah.williams@example.com",
        "phone": "+1-555-0104", "date_of_birth": date(1988, 3, 18), "gender": "female",
        "address": {"street": "321 Elm Street", "city": "Miami", "state": "FL",
                    "country": "USA", "zip_code": "33101"},
    },
]

ORIGIN = {"city": "New York", "country": "USA"}

UPCOMING_TRIPS = [
    # (destination, booking type, airline, flight prefix, airport, cabin, hotel, address, room, amount, payment)
    ({"city": "Dubai", "country": "UAE"}, "flight", "Emirates", "EK", "DXB", "economy",
     "Burj Al Arab", "Jumeirah Beach", "Deluxe Room", 2500, "credit-card"),
    ({"city": "Paris", "country": "France"}, "package", "Air France", "AF", "CDG", "business",
     "Hotel Plaza Athenee", "25 Avenue Montaigne", "Suite", 3500, "debit-card"),
    ({"city": "Tokyo", "country": "Japan"}, "hotel", "Japan Airlines", "JL", "NRT", "premium-economy",
     "Park Hyatt Tokyo", "3-7-1-2 Nishi Shinjuku", "Executive Room", 4200, "paypal"),
]

COMPLETED_TRIPS = [
    ({"city": "Barcelona", "country": "Spain"}, "package", "Iberia", "IB", "BCN", "economy",
     "Hotel Casa Fuster", "Passeig de Gracia 132", "Standard Room", 1800, "credit-card"),
    ({"city": "Rome", "country": "Italy"}, "flight", "Alitalia", "AZ", "FCO", "economy",
     "Hotel de Russie", "Via del Babuino 9", "Standard Room", 2200, "credit-card"),
]


def new_booking_reference() -> str:
    return f"BK{uuid.uuid4().hex[:10].upper()}"


def _traveller_for(user: dict) -> dict:
    return {
        "id": uuid.uuid4().hex,
        "first_name": user["first_name"],
        "last_name": user["last_name"],
        "date_of_birth": user["date_of_birth"].isoformat(),
        "gender": user["gender"],
        "passport_number": f"P{uuid.uuid4().int % 10_000_000:07d}",
        "nationality": "American",
    }


def _booking(user: dict, trip: tuple, start: datetime, nights: int, status: str) -> dict:
    (destination, booking_type, airline, prefix, airport, cabin,
     hotel, address, room, amount, payment) = trip
    end = start + timedelta(days=nights)
    return {
        "booking_reference": new_booking_reference(),
        "origin": ORIGIN,
        "destination": destination,
        "start_date": start,
        "end_date": end,
        "last_travel_date": end,
        "booking_type": booking_type,
        "status": status,
        "travellers": [_traveller_for(user)],
        "flight_details": {
            "airline": airline,
            "flight_number": f"{prefix}{uuid.uuid4().int % 1000}",
            "departure": {"airport": "JFK", "city": ORIGIN["city"],
                          "date": start.isoformat(), "time": "14:30"},
            "arrival": {"airport": airport, "city": destination["city"],
                        "date": start.isoformat(), "time": "23:45"},
            "cabin_class": cabin,
        },
        "hotel_details": {
            "name": hotel,
            "address": address,
            "city": destination["city"],
            "check_in": start.isoformat(),
            "check_out": end.isoformat(),
            "room_type": room,
            "number_of_rooms": 1,
        },
        "total_amount": amount,
        "currency": "USD",
        "payment_status": "paid",
        "payment_method": payment,
        "booking_source": "web",
    }


def generate_sample_bookings(user: dict, today: Optional[datetime] = None) -> list[dict]:
    """Three 7-day upcoming trips (30/90/150 days out) and two 5-day past trips (60/150 days ago)."""
    today = today or start_of_today()
    bookings = [
        _booking(user, trip, today + timedelta(days=30 + i * 60), 7, "confirmed")
        for i, trip in enumerate(UPCOMING_TRIPS)
    ]
    bookings += [
        _booking(user, trip, today - timedelta(days=60 + i * 90), 5, "completed")
        for i, trip in enumerate(COMPLETED_TRIPS)
    ]
    return bookings


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        await session.execute(delete(Booking))
        await session.execute(delete(User))

        total = 0
        for data in SAMPLE_USERS:
            user = User(**data, hashed_password=hash_password(SAMPLE_PASSWORD))
            session.add(user)
            await session.flush()

            bookings = generate_sample_bookings(data)
            session.add_all(Booking(user_id=user.id, **b) for b in bookings)
            total += len(bookings)
            logger.info("seed_user_created", email=user.email, bookings=len(bookings))

        await session.commit()

    logger.info("seed_completed", users=len(SAMPLE_USERS), bookings=total)
    await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed())
