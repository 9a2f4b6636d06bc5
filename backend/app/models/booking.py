"""
Booking aggregate: one row per booking with its travellers embedded.

Key design decisions:
- `travellers` is a JSON array of sub-records, each with its own generated
  `id`; it is only ever rewritten as a whole (see traveller_service)
- `version` is the optimistic-lock token for traveller mutations
- `last_travel_date` drives the upcoming/completed split, so it is indexed
  alone and together with `user_id`
- `booking_reference` is the globally unique human-facing identifier
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, Numeric, JSON, Text,
    ForeignKey, Index, CheckConstraint,
)

from app.db.base import Base, TimestampMixin

BOOKING_TYPES = ("flight", "hotel", "package", "car-rental")
BOOKING_STATUSES = ("confirmed", "pending", "cancelled", "completed")
PAYMENT_STATUSES = ("paid", "pending", "failed", "refunded")
PAYMENT_METHODS = ("credit-card", "debit-card", "paypal", "bank-transfer")
BOOKING_SOURCES = ("web", "mobile", "agent")


def _in(column: str, values: tuple) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    booking_reference = Column(String(20), nullable=False, unique=True, index=True)

    # {city, country}
    origin = Column(JSON, nullable=False)
    destination = Column(JSON, nullable=False)

    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    last_travel_date = Column(DateTime(timezone=True), nullable=False)

    booking_type = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default="confirmed")

    travellers = Column(JSON, nullable=False, default=list)
    flight_details = Column(JSON, nullable=True)
    hotel_details = Column(JSON, nullable=True)

    total_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    payment_status = Column(String(20), nullable=False, default="paid")
    payment_method = Column(String(20), nullable=False)
    special_requests = Column(Text, nullable=True)
    booking_source = Column(String(10), nullable=False, default="web")

    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="check_booking_total_amount_non_negative"),
        CheckConstraint("end_date >= start_date", name="check_booking_dates_ordered"),
        CheckConstraint(_in("booking_type", BOOKING_TYPES), name="check_booking_type"),
        CheckConstraint(_in("status", BOOKING_STATUSES), name="check_booking_status"),
        CheckConstraint(_in("payment_status", PAYMENT_STATUSES), name="check_booking_payment_status"),
        CheckConstraint(_in("payment_method", PAYMENT_METHODS), name="check_booking_payment_method"),
        CheckConstraint(_in("booking_source", BOOKING_SOURCES), name="check_booking_source"),
        Index("ix_bookings_last_travel_date", "last_travel_date"),
        Index("ix_bookings_status", "status"),
        Index("ix_bookings_created_at", "created_at"),
        # Covers the per-user upcoming/completed listing
        Index("ix_bookings_user_last_travel_date", "user_id", "last_travel_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, ref={self.booking_reference}, "
            f"user={self.user_id}, travellers={len(self.travellers or [])})>"
        )
