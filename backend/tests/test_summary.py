"""
Tests for booking summaries: text-generation path, fallback, Redis cache
and the HTTP endpoint.
"""

from types import SimpleNamespace

import fakeredis.aioredis
import pytest
import pytest_asyncio
from httpx import AsyncClient
from openai import OpenAIError

from app.main import app
from app.api.deps import get_text_generator
from app.core.exceptions import SummaryUnavailableError
from app.infrastructure.text_client import TextGenerator
from app.models.booking import Booking
from app.services import cache_service
from app.services.cache_service import invalidate_booking_summaries, set_cached_summary
from app.services.summary_service import (
    FALLBACK_NOTE,
    booking_facts,
    build_prompt,
    format_travel_date,
    generate_booking_summary,
    service_highlights,
)
from conftest import traveller, utc


class FakeGenerator:
    def __init__(self, text: str = "", error: Exception = None):
        self.text = text
        self.error = error
        self.prompts = []

    async def generate(self, prompt, *, system, max_tokens, temperature):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.text


def sample_booking(**overrides) -> Booking:
    fields = dict(
        id=7,
        version=1,
        booking_reference="BK7",
        origin={"city": "Delhi", "country": "India"},
        destination={"city": "Dubai", "country": "UAE"},
        start_date=utc(2025, 6, 15),
        end_date=utc(2025, 6, 20),
        last_travel_date=utc(2025, 6, 20),
        booking_type="package",
        travellers=[traveller("Ann", "Lee"), traveller("Bo", "Chen")],
        flight_details={
            "airline": "Emirates",
            "flight_number": "EK512",
            "cabin_class": "business",
        },
        hotel_details={"name": "Atlantis", "room_type": "Suite", "number_of_rooms": 1},
        total_amount=2499.5,
        currency="USD",
    )
    fields.update(overrides)
    return Booking(**fields)


def test_format_travel_date():
    assert format_travel_date(utc(2025, 6, 15)) == "June 15, 2025"
    assert format_travel_date(utc(2025, 1, 3)) == "January 3, 2025"


def test_service_highlights_includes_flight_and_hotel():
    highlights = service_highlights(sample_booking())
    assert "Emirates EK512, business class." in highlights
    assert "Atlantis, Suite, 1 room(s)." in highlights


def test_service_highlights_empty_without_details():
    assert service_highlights(sample_booking(flight_details=None, hotel_details=None)) == ""


def test_prompt_carries_booking_facts():
    prompt = build_prompt(booking_facts(sample_booking()))
    assert "Destination: Dubai, UAE" in prompt
    assert "Origin: Delhi, India" in prompt
    assert "Travel Dates: June 15, 2025 to June 20, 2025" in prompt
    assert "Duration: 5 days" in prompt
    assert "Number of Travellers: 2" in prompt
    assert "Total Amount: USD 2499.50" in prompt


@pytest.mark.asyncio
async def test_summary_uses_generator_text():
    generator = FakeGenerator(text="  Sun, sand and skyscrapers await in Dubai!  \n")

    result = await generate_booking_summary(sample_booking(), generator)

    assert result["summary"] == "Sun, sand and skyscrapers await in Dubai!"
    assert result["message"] == "Booking summary generated successfully"
    assert result["booking_id"] == 7
    assert result["booking_reference"] == "BK7"
    assert "note" not in result
    assert len(generator.prompts) == 1


@pytest.mark.asyncio
async def test_summary_falls_back_without_generator():
    result = await generate_booking_summary(sample_booking(), None)

    assert result["note"] == FALLBACK_NOTE
    assert result["message"] == "Booking summary generated successfully (fallback)"
    assert result["summary"] == (
        "You're traveling to Dubai, UAE from Delhi, India on June 15, 2025. "
        "Your 5-day package booking for 2 traveller(s) includes all the "
        "essentials for a great trip!"
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("generator", [
    FakeGenerator(error=SummaryUnavailableError("rate limited")),
    FakeGenerator(error=TimeoutError()),
    FakeGenerator(text="   "),
])
async def test_summary_falls_back_on_generator_failure(generator):
    result = await generate_booking_summary(sample_booking(), generator)
    assert result["note"] == FALLBACK_NOTE
    assert result["summary"].startswith("You're traveling to Dubai, UAE")


def _fake_openai_client(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


@pytest.mark.asyncio
async def test_text_generator_returns_first_choice():
    captured = {}

    async def create(**kwargs):
        captured.update(kwargs)
        message = SimpleNamespace(content=" Have a great trip! ")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    generator = TextGenerator(_fake_openai_client(create), "test-model")
    text = await generator.generate("prompt", system="sys", max_tokens=50, temperature=0.2)

    assert text == "Have a great trip!"
    assert captured["model"] == "test-model"
    assert captured["messages"][0] == {"role": "system", "content": "sys"}
    assert captured["max_tokens"] == 50


@pytest.mark.asyncio
async def test_text_generator_wraps_client_errors():
    async def create(**kwargs):
        raise OpenAIError("service down")

    generator = TextGenerator(_fake_openai_client(create), "test-model")
    with pytest.raises(SummaryUnavailableError):
        await generator.generate("prompt", system="sys", max_tokens=50, temperature=0.2)


@pytest.mark.asyncio
async def test_summary_endpoint_fallback(client: AsyncClient, auth_headers: dict, make_booking):
    booking = await make_booking(nights=5)

    response = await client.post(f"/api/v1/bookings/{booking.id}/summary", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["booking_id"] == booking.id
    assert data["booking_reference"] == booking.booking_reference
    assert data["note"] == FALLBACK_NOTE
    assert "Dubai, UAE" in data["summary"]
    assert "5-day flight booking for 1 traveller(s)" in data["summary"]


@pytest.mark.asyncio
async def test_summary_endpoint_with_generator(client: AsyncClient, auth_headers: dict, make_booking):
    booking = await make_booking()
    app.dependency_overrides[get_text_generator] = lambda: FakeGenerator(text="Dubai awaits!")

    response = await client.post(f"/api/v1/bookings/{booking.id}/summary", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["summary"] == "Dubai awaits!"
    assert data.get("note") is None


@pytest.mark.asyncio
async def test_summary_endpoint_other_users_booking(
    client: AsyncClient, auth_headers: dict, make_booking, other_user
):
    theirs = await make_booking(user=other_user)
    response = await client.post(f"/api/v1/bookings/{theirs.id}/summary", headers=auth_headers)
    assert response.status_code == 404


@pytest_asyncio.fixture
async def fake_redis(monkeypatch):
    """In-memory Redis behind the summary cache."""
    redis_client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    await redis_client.flushall()

    async def _get_redis():
        return redis_client

    monkeypatch.setattr(cache_service, "get_redis", _get_redis)
    yield redis_client
    await redis_client.aclose()


@pytest.mark.asyncio
async def test_generated_summary_is_cached_per_version(fake_redis):
    booking = sample_booking()
    await generate_booking_summary(booking, FakeGenerator(text="Dubai awaits!"))

    assert await fake_redis.keys("summary:*") == ["summary:7:v1"]

    again = await generate_booking_summary(booking, None)
    assert again["summary"] == "Dubai awaits!"
    assert "note" not in again


@pytest.mark.asyncio
async def test_fallback_summary_is_not_cached(fake_redis):
    result = await generate_booking_summary(sample_booking(), FakeGenerator(error=TimeoutError()))

    assert result["note"] == FALLBACK_NOTE
    assert await fake_redis.keys("*") == []


@pytest.mark.asyncio
async def test_version_bump_skips_old_cached_summary(fake_redis):
    await generate_booking_summary(sample_booking(version=1), FakeGenerator(text="Dubai awaits!"))

    result = await generate_booking_summary(sample_booking(version=2), None)

    assert result["note"] == FALLBACK_NOTE
    assert await fake_redis.keys("summary:*") == ["summary:7:v1"]


@pytest.mark.asyncio
async def test_invalidate_removes_every_version_of_one_booking(fake_redis):
    for version in (1, 2, 3):
        await set_cached_summary(7, version, {"summary": f"v{version}"})
    await set_cached_summary(8, 1, {"summary": "other booking"})

    await invalidate_booking_summaries(7)

    assert await fake_redis.keys("summary:*") == ["summary:8:v1"]


@pytest.mark.asyncio
async def test_traveller_change_invalidates_cached_summary(
    client: AsyncClient, auth_headers: dict, make_booking, fake_redis
):
    booking = await make_booking()
    await set_cached_summary(booking.id, booking.version, {"summary": "stale"})

    response = await client.post("/api/v1/travellers/", json={
        "booking_id": booking.id,
        "first_name": "Raj",
        "last_name": "Patel",
        "date_of_birth": "1985-03-02",
        "gender": "male",
        "nationality": "Indian",
    }, headers=auth_headers)

    assert response.status_code == 201
    assert await fake_redis.keys("summary:*") == []
