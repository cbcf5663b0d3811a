"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Creates all tables for the speaker marketplace:
profiles, speakers, events, invitations, bookings,
status_changes, notifications.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_type = sa.Enum("speaker", "organizer", "both", name="usertype")
experience_level = sa.Enum("beginner", "intermediate", "expert", name="experiencelevel")
event_status = sa.Enum("open", "in_progress", "completed", "finished", "cancelled", name="eventstatus")
event_format = sa.Enum("in_person", "virtual", "hybrid", name="eventformat")
invitation_status = sa.Enum("pending", "accepted", "declined", "expired", name="invitationstatus")
booking_status = sa.Enum("pending", "accepted", "rejected", "paid", "completed", "cancelled", name="bookingstatus")
booking_priority = sa.Enum("low", "medium", "high", name="bookingpriority")
entity_type = sa.Enum("booking", "invitation", name="entitytype")
notification_type = sa.Enum(
    "submitted", "reviewed", "accepted", "rejected", "paid", "completed", "rated", "cancelled",
    "reminder", "deadline", "invited", "invitation_accepted", "invitation_declined",
    name="notificationtype",
)


def upgrade() -> None:
    # --- profiles ---
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("user_type", user_type, nullable=False, server_default="speaker"),
        sa.Column("timezone", sa.String(50), nullable=False, server_default="UTC"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- speakers ---
    op.create_table(
        "speakers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("profile_id", sa.String(36), sa.ForeignKey("profiles.id"), nullable=False, unique=True),
        sa.Column("experience_level", experience_level, nullable=False, server_default="beginner"),
        sa.Column("hourly_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("available", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("occupation", sa.String(200), nullable=True),
        sa.Column("company", sa.String(200), nullable=True),
        sa.Column("topics", sa.JSON, nullable=True),
        sa.Column("portfolio_url", sa.String(500), nullable=True),
        sa.Column("total_talks", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_ratings", sa.Integer, nullable=False, server_default="0"),
        sa.Column("average_rating", sa.Numeric(4, 2), nullable=False, server_default="0"),
        sa.Column("total_earnings", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("organizer_id", sa.String(36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("event_type", sa.String(50), nullable=False, server_default="conference"),
        sa.Column("format", event_format, nullable=False, server_default="in_person"),
        sa.Column("location", sa.String(500), nullable=True),
        sa.Column("date_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("timezone", sa.String(50), nullable=False, server_default="UTC"),
        sa.Column("duration_hours", sa.Numeric(5, 2), nullable=False),
        sa.Column("budget_min", sa.Numeric(10, 2), nullable=True),
        sa.Column("budget_max", sa.Numeric(10, 2), nullable=True),
        sa.Column("required_topics", sa.JSON, nullable=True),
        sa.Column("status", event_status, nullable=False, server_default="open"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_events_date_time", "events", ["date_time"])

    # --- invitations ---
    op.create_table(
        "invitations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("organizer_id", sa.String(36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("speaker_id", sa.String(36), sa.ForeignKey("speakers.id"), nullable=False),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("proposed_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("status", invitation_status, nullable=False, server_default="pending"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "speaker_id", name="uq_invitations_event_speaker"),
    )

    # --- bookings ---
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("speaker_id", sa.String(36), sa.ForeignKey("speakers.id"), nullable=False),
        sa.Column("organizer_id", sa.String(36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("invitation_id", sa.String(36), sa.ForeignKey("invitations.id"), nullable=True),
        sa.Column("status", booking_status, nullable=False, server_default="pending"),
        sa.Column("agreed_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("status_reason", sa.String(500), nullable=True),
        sa.Column("priority", booking_priority, nullable=False, server_default="medium"),
        sa.Column("reviewer_notes", sa.Text, nullable=True),
        sa.Column("payment_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("payment_reference", sa.String(64), nullable=True),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rating", sa.Integer, nullable=True),
        sa.Column("rating_comment", sa.Text, nullable=True),
        sa.Column("rated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "speaker_id", name="uq_bookings_event_speaker"),
        sa.CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_bookings_rating_range"),
    )
    op.create_index("ix_bookings_organizer_status", "bookings", ["organizer_id", "status"])

    # --- status_changes ---
    op.create_table(
        "status_changes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("entity_type", entity_type, nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=False),
        sa.Column("previous_status", sa.String(20), nullable=True),
        sa.Column("new_status", sa.String(20), nullable=False),
        sa.Column("changed_by", sa.String(36), sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("reason", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_status_changes_entity", "status_changes", ["entity_type", "entity_id"])

    # --- notifications ---
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("recipient_id", sa.String(36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("notification_type", notification_type, nullable=False),
        sa.Column("booking_id", sa.String(36), sa.ForeignKey("bookings.id"), nullable=True),
        sa.Column("invitation_id", sa.String(36), sa.ForeignKey("invitations.id"), nullable=True),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("metadata", sa.JSON, nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_notifications_recipient_id", "notifications", ["recipient_id"])


def downgrade() -> None:
    op.drop_index("ix_notifications_recipient_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_status_changes_entity", table_name="status_changes")
    op.drop_table("status_changes")
    op.drop_index("ix_bookings_organizer_status", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("invitations")
    op.drop_index("ix_events_date_time", table_name="events")
    op.drop_table("events")
    op.drop_table("speakers")
    op.drop_table("profiles")

    bind = op.get_bind()
    for enum_type in (
        notification_type, entity_type, booking_priority, booking_status,
        invitation_status, event_format, event_status, experience_level, user_type,
    ):
        enum_type.drop(bind, checkfirst=True)
