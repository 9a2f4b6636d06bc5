"""Initial schema: users and bookings with embedded travellers.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", sa.String(10), nullable=False),
        sa.Column("address", sa.JSON(), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("refresh_token", sa.String(512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("gender IN ('male', 'female', 'other')", name="check_user_gender"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("booking_reference", sa.String(20), nullable=False),
        sa.Column("origin", sa.JSON(), nullable=False),
        sa.Column("destination", sa.JSON(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_travel_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("booking_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'confirmed'")),
        sa.Column("travellers", sa.JSON(), nullable=False),
        sa.Column("flight_details", sa.JSON(), nullable=True),
        sa.Column("hotel_details", sa.JSON(), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default=sa.text("'USD'")),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default=sa.text("'paid'")),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("booking_source", sa.String(10), nullable=False, server_default=sa.text("'web'")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("total_amount >= 0", name="check_booking_total_amount_non_negative"),
        sa.CheckConstraint("end_date >= start_date", name="check_booking_dates_ordered"),
        sa.CheckConstraint(
            "booking_type IN ('flight', 'hotel', 'package', 'car-rental')", name="check_booking_type"
        ),
        sa.CheckConstraint(
            "status IN ('confirmed', 'pending', 'cancelled', 'completed')", name="check_booking_status"
        ),
        sa.CheckConstraint(
            "payment_status IN ('paid', 'pending', 'failed', 'refunded')",
            name="check_booking_payment_status",
        ),
        sa.CheckConstraint(
            "payment_method IN ('credit-card', 'debit-card', 'paypal', 'bank-transfer')",
            name="check_booking_payment_method",
        ),
        sa.CheckConstraint("booking_source IN ('web', 'mobile', 'agent')", name="check_booking_source"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_booking_reference", "bookings", ["booking_reference"], unique=True)
    # The upcoming/completed split filters and sorts on last_travel_date.
    # Per-user listings hit the composite index; the single-column one
    # serves cross-user reporting queries.
    op.create_index("ix_bookings_last_travel_date", "bookings", ["last_travel_date"])
    op.create_index("ix_bookings_user_last_travel_date", "bookings", ["user_id", "last_travel_date"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_created_at", "bookings", ["created_at"])


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("users")
