"""Initial schema: listings, room_configurations, bookings with indexes and constraints.

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
        "listings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_listings_id", "listings", ["id"])

    # Room configurations. available_rooms keeps its legacy name but holds
    # available *beds*, not rooms.
    op.create_table(
        "room_configurations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("listing_id", sa.Integer(), sa.ForeignKey("listings.id"), nullable=False),
        sa.Column("room_type", sa.String(50), nullable=False),
        sa.Column("rent_per_month", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_rooms", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("available_rooms", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("manual_override", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("available_rooms >= 0", name="check_available_beds_non_negative"),
        sa.CheckConstraint("total_rooms >= 1", name="check_total_rooms_positive"),
    )
    op.create_index("ix_room_configurations_id", "room_configurations", ["id"])
    op.create_index("ix_room_configurations_listing_id", "room_configurations", ["listing_id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("room_config_id", sa.Integer(), sa.ForeignKey("room_configurations.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("duration_months", sa.Integer(), nullable=True, server_default=sa.text("1")),
        sa.Column("amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="check_booking_status",
        ),
        sa.CheckConstraint(
            "duration_months IS NULL OR duration_months >= 1",
            name="check_booking_duration_positive",
        ),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    # Occupancy count: WHERE room_config_id = ? AND status IN ('pending', 'confirmed')
    op.create_index("ix_bookings_room_config_status", "bookings", ["room_config_id", "status"])
    # Expiry sweep: WHERE status = 'confirmed' AND start_date <= ?
    op.create_index("ix_bookings_status_start_date", "bookings", ["status", "start_date"])


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("room_configurations")
    op.drop_table("listings")
