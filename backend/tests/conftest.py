"""
Pytest fixtures for test database, client, authentication and bookings.

Each test gets a fresh schema on its own engine (SQLite via aiosqlite by
default, override with TEST_DATABASE_URL), so tests never share rows.
Redis is disabled and the text generator is overridden to None, so
summaries take the fallback path unless a test installs a fake.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import uuid
from datetime import date, datetime, timezone, timedelta
from typing import AsyncGenerator, Optional

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.main import app
from app.api.deps import get_text_generator
from app.db.base import Base
from app.db.session import get_db
from app.core.security import create_access_token, hash_password
from app.models.user import User
from app.models.booking import Booking
from app.services.booking_rules import start_of_today

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test_travel_booking.db")

TEST_PASSWORD = "testpassword123"


def traveller(first_name="Ann", last_name="Lee", date_of_birth="1990-01-01", **extra) -> dict:
    """Stored traveller sub-record with a fresh id."""
    return {
        "id": uuid.uuid4().hex,
        "first_name": first_name,
        "last_name": last_name,
        "date_of_birth": date_of_birth,
        "gender": extra.pop("gender", "female"),
        "passport_number": extra.pop("passport_number", None),
        "nationality": extra.pop("nationality", "Canadian"),
        **extra,
    }


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB and text-generator dependencies."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_text_generator] = lambda: None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db_session: AsyncSession, email: str, first_name: str) -> User:
    user = User(
        email=email,
        first_name=first_name,
        last_name="Tester",
        phone="+1-555-0100",
        date_of_birth=date(1990, 5, 15),
        gender="female",
        address={
            "street": "1 Test Street",
            "city": "Toronto",
            "state": "ON",
            "country": "Canada",
            "zip_code": "M5V 2T6",
        },
        hashed_password=hash_password(TEST_PASSWORD),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "test@example.com", "Tess")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "other@example.com", "Otto")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    token = create_access_token(data={"sub": str(test_user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def other_auth_headers(other_user: User) -> dict:
    token = create_access_token(data={"sub": str(other_user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def make_booking(db_session: AsyncSession, test_user: User):
    """Factory: insert a booking whose last travel day is `days_from_today` away."""
    counter = 0

    async def _make(
        days_from_today: int = 30,
        nights: int = 7,
        travellers: Optional[list] = None,
        user: Optional[User] = None,
        **overrides,
    ) -> Booking:
        nonlocal counter
        counter += 1
        last_travel = start_of_today() + timedelta(days=days_from_today)
        start = last_travel - timedelta(days=nights)
        booking = Booking(
            user_id=(user or test_user).id,
            booking_reference=overrides.pop("booking_reference", f"BKTEST{counter:04d}"),
            origin={"city": "Delhi", "country": "India"},
            destination={"city": "Dubai", "country": "UAE"},
            start_date=start,
            end_date=last_travel,
            last_travel_date=last_travel,
            booking_type=overrides.pop("booking_type", "flight"),
            status=overrides.pop("status", "confirmed"),
            travellers=travellers if travellers is not None else [traveller()],
            total_amount=overrides.pop("total_amount", 1250),
            currency="USD",
            payment_status="paid",
            payment_method="credit-card",
            booking_source="web",
            **overrides,
        )
        db_session.add(booking)
        await db_session.commit()
        await db_session.refresh(booking)
        return booking

    return _make


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)
