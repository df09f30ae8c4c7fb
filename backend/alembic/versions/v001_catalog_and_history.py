"""Destinations, flights, accommodations and search history tables

Revision ID: v001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "v001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- destinations ---
    op.create_table(
        "destinations",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("airport_code", sa.String(10), nullable=False),
        sa.Column("image_url", sa.String(500)),
        sa.Column("description", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("idx_destinations_name_lower", "destinations", [sa.text("lower(name)")])

    # --- flights ---
    op.create_table(
        "flights",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("destination_id", UUID(as_uuid=True), sa.ForeignKey("destinations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("airline", sa.String(100), nullable=False),
        sa.Column("flight_number", sa.String(20), nullable=False),
        sa.Column("origin", sa.String(10), nullable=False),
        sa.Column("departure_time", sa.DateTime, nullable=False),
        sa.Column("arrival_time", sa.DateTime, nullable=False),
        sa.Column("duration_minutes", sa.Integer, nullable=False),
        sa.Column("price", sa.Float, nullable=False),
        sa.Column("available_seats", sa.Integer, nullable=False),
        sa.Column("aircraft", sa.String(50)),
    )
    op.create_index("idx_flights_dest_departure", "flights", ["destination_id", "departure_time"])
    op.create_index("idx_flights_price", "flights", ["price"])

    # --- accommodations ---
    op.create_table(
        "accommodations",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("destination_id", UUID(as_uuid=True), sa.ForeignKey("destinations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("rating", sa.Float, nullable=False),
        sa.Column("price_per_night", sa.Float, nullable=False),
        sa.Column("amenities", JSONB, server_default="[]"),
        sa.Column("available_rooms", sa.Integer, nullable=False),
        sa.Column("image_url", sa.String(500)),
        sa.Column("description", sa.Text),
        sa.Column("check_in_time", sa.String(5), server_default="15:00"),
        sa.Column("check_out_time", sa.String(5), server_default="11:00"),
    )
    op.create_index("idx_accommodations_dest_type", "accommodations", ["destination_id", "type"])

    # --- search_history ---
    op.create_table(
        "search_history",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("destination", sa.String(100), nullable=False),
        sa.Column("check_in", sa.Date, nullable=False),
        sa.Column("check_out", sa.Date, nullable=False),
        sa.Column("guests", sa.Integer, nullable=False),
        sa.Column("budget", sa.Float, nullable=False),
        sa.Column("preferences", JSONB, nullable=False),
        sa.Column("results_count", sa.Integer, nullable=False),
        sa.Column("search_mode", sa.String(10), server_default="classic"),
        sa.Column("original_query", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("idx_search_history_created", "search_history", ["created_at"])


def downgrade() -> None:
    op.drop_table("search_history")
    op.drop_table("accommodations")
    op.drop_table("flights")
    op.drop_table("destinations")
