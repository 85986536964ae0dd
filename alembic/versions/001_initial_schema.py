"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

Creates the booking lifecycle tables:
- Bookings
- In-app notifications
"""

from typing import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

BOOKING_STATUSES = (
    "pending",
    "confirmed",
    "ongoing",
    "ended",
    "unconfirmed",
    "rejected",
    "cancelled",
)


def upgrade() -> None:
    """Create all database tables."""

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("requester_id", sa.Uuid, nullable=False, index=True),
        sa.Column("provider_id", sa.Uuid, nullable=False, index=True),
        sa.Column("event_start", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("event_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(200), nullable=False),
        sa.Column("address", sa.String(300), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("postal_code", sa.String(20), nullable=False),
        sa.Column("party_type", sa.String(100), nullable=False),
        sa.Column("guests", sa.String(50), nullable=False),
        sa.Column("age_range", sa.String(50), nullable=False),
        sa.Column("music_genres", sa.JSON),
        sa.Column("additional_services", sa.JSON),
        sa.Column(
            "status",
            sa.Enum(*BOOKING_STATUSES, name="booking_status", native_enum=False, length=20),
            nullable=False,
            server_default="pending",
            index=True,
        ),
        sa.Column("transition_applied", sa.Boolean, nullable=False, server_default=sa.false(), index=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("cancellation_reason", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("status_changed_at", sa.DateTime(timezone=True)),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("event_start < event_end", name="ck_bookings_event_window"),
    )

    # ==================== NOTIFICATIONS ====================
    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_id", sa.Uuid, nullable=False, index=True),
        sa.Column("booking_id", sa.Uuid, sa.ForeignKey("bookings.id")),
        sa.Column("notification_type", sa.String(50), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("on_click_path", sa.Text),
        sa.Column("is_read", sa.Boolean, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.drop_table("notifications")
    op.drop_table("bookings")
