"""
Booking summary adapter.

Turns one booking into a short friendly description. The text generator is
tried first; whatever goes wrong with it (no client configured, API error,
timeout, empty output) the caller still gets a summary, built
deterministically from the booking's own fields and flagged with `note`.
"""

from datetime import datetime, timezone
from typing import Optional

from app.models.booking import Booking
from app.infrastructure.text_client import TextGenerator
from app.services.booking_rules import duration_days, ensure_utc
from app.services.cache_service import get_cached_summary, set_cached_summary
from app.core.config import get_settings
from app.core.exceptions import SummaryUnavailableError
from app.core.metrics import record_summary, summary_latency
from app.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

SYSTEM_PROMPT = (
    "You are a friendly travel assistant that creates engaging and personalized "
    "booking summaries for travelers. Keep summaries concise, warm, and exciting."
)

FALLBACK_NOTE = "AI service temporarily unavailable, fallback summary provided"


def format_travel_date(value: datetime) -> str:
    """June 15, 2025"""
    value = ensure_utc(value)
    return f"{value:%B} {value.day}, {value.year}"


def _place(place: dict) -> str:
    return f"{place['city']}, {place['country']}"


def service_highlights(booking: Booking) -> str:
    parts = []
    flight = booking.flight_details
    if flight:
        parts.append(
            f"Flight: {flight['airline']} {flight['flight_number']}, "
            f"{flight.get('cabin_class', 'economy')} class."
        )
    hotel = booking.hotel_details
    if hotel:
        parts.append(
            f"Hotel: {hotel['name']}, {hotel['room_type']}, "
            f"{hotel['number_of_rooms']} room(s)."
        )
    return " ".join(parts)


def booking_facts(booking: Booking) -> dict:
    return {
        "destination": _place(booking.destination),
        "origin": _place(booking.origin),
        "start_date": format_travel_date(booking.start_date),
        "end_date": format_travel_date(booking.end_date),
        "duration": duration_days(booking.start_date, booking.end_date),
        "booking_type": booking.booking_type,
        "travellers_count": len(booking.travellers or []),
        "total_amount": f"{booking.total_amount:.2f}",
        "currency": booking.currency,
        "highlights": service_highlights(booking),
    }


def build_prompt(facts: dict) -> str:
    lines = [
        "Generate a friendly and engaging booking summary for a travel booking "
        "with the following details:",
        "",
        f"Destination: {facts['destination']}",
        f"Origin: {facts['origin']}",
        f"Travel Dates: {facts['start_date']} to {facts['end_date']}",
        f"Duration: {facts['duration']} days",
        f"Booking Type: {facts['booking_type']}",
        f"Number of Travellers: {facts['travellers_count']}",
        f"Total Amount: {facts['currency']} {facts['total_amount']}",
    ]
    if facts["highlights"]:
        lines.append(facts["highlights"])
    lines += [
        "",
        "Please create a warm, personalized summary that highlights the key aspects "
        "of this trip. Keep it concise but engaging, similar to: \"You're traveling "
        "to Dubai from Delhi on June 15, 2025. Your booking includes round-trip "
        "flights and hotel stay for 5 days.\"",
        "",
        "Make it sound exciting and personal, focusing on the destination and key highlights.",
    ]
    return "\n".join(lines)


def fallback_summary(facts: dict) -> str:
    return (
        f"You're traveling to {facts['destination']} from {facts['origin']} "
        f"on {facts['start_date']}. Your {facts['duration']}-day {facts['booking_type']} "
        f"booking for {facts['travellers_count']} traveller(s) includes all the "
        f"essentials for a great trip!"
    )


async def _generate(generator: Optional[TextGenerator], prompt: str) -> str:
    if generator is None:
        raise SummaryUnavailableError("No text generator configured")

    with summary_latency.time():
        text = await generator.generate(
            prompt,
            system=SYSTEM_PROMPT,
            max_tokens=settings.SUMMARY_MAX_TOKENS,
            temperature=settings.SUMMARY_TEMPERATURE,
        )

    text = (text or "").strip()
    if not text:
        raise SummaryUnavailableError("Text generator returned no text")
    return text


async def generate_booking_summary(booking: Booking, generator: Optional[TextGenerator]) -> dict:
    """
    Summary payload for one booking. Never raises for text-generation
    problems; only successful generations are cached.
    """
    cached = await get_cached_summary(booking.id, booking.version)
    if cached:
        record_summary("cache")
        return cached

    facts = booking_facts(booking)
    payload = {
        "booking_id": booking.id,
        "booking_reference": booking.booking_reference,
    }

    try:
        text = await _generate(generator, build_prompt(facts))
    except Exception as exc:
        # Any generator failure degrades to the fallback sentence
        record_summary("fallback")
        logger.warning("summary_fallback", booking_id=booking.id, error=str(exc))
        return {
            **payload,
            "message": "Booking summary generated successfully (fallback)",
            "summary": fallback_summary(facts),
            "generated_at": datetime.now(timezone.utc),
            "note": FALLBACK_NOTE,
        }

    result = {
        **payload,
        "message": "Booking summary generated successfully",
        "summary": text,
        "generated_at": datetime.now(timezone.utc),
    }
    await set_cached_summary(booking.id, booking.version, result)

    record_summary("ai")
    logger.info("summary_generated", booking_id=booking.id, length=len(text))
    return result
